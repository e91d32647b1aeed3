"""Tests for boot configuration loading and orchestrator construction."""

from __future__ import annotations

import json
import sys
import types
from pathlib import Path

import pytest

from bootseq.config.loader import (
    build_application,
    build_orchestrator,
    import_target,
    load_boot_config,
)
from bootseq.config.schema import BootConfig
from bootseq.plugins import DemoPlugin
from bootseq.runtime.errors import ConfigurationError, UnknownInitializer

TOML_CONFIG = """
[orchestrator]
error_policy = "collect_all"
eager_load = false

[[hooks]]
phase = "before_initialize"
target = "boot_fixtures:hook"

[[initializers]]
name = "db"
target = "boot_fixtures:init_db"

[[initializers]]
name = "cache"
target = "boot_fixtures:init_cache"
before = "db"
"""


@pytest.fixture
def fixtures_module(monkeypatch: pytest.MonkeyPatch) -> types.ModuleType:
    """Importable module providing callback targets."""
    module = types.ModuleType("boot_fixtures")
    module.calls = []
    module.hook = lambda app: module.calls.append("hook")
    module.init_db = lambda app: module.calls.append("db")
    module.init_cache = lambda app: module.calls.append("cache")
    module.not_a_plugin = object()
    monkeypatch.setitem(sys.modules, "boot_fixtures", module)
    return module


def test_none_returns_defaults() -> None:
    config = load_boot_config(None)

    assert config == BootConfig.default()
    assert config.orchestrator.error_policy == "fail_fast"
    assert config.orchestrator.eager_load is True


def test_inline_toml_and_file_sources_agree(tmp_path: Path) -> None:
    path = tmp_path / "boot.toml"
    path.write_text(TOML_CONFIG, encoding="utf-8")

    from_inline = load_boot_config(TOML_CONFIG)
    from_file = load_boot_config(path)
    from_str_path = load_boot_config(str(path))

    assert from_inline == from_file == from_str_path
    assert from_file.orchestrator.error_policy == "collect_all"
    assert from_file.initializers[1].before == ["db"]
    assert from_file.hooks[0].phase == "before_initialize"


def test_json_sources(tmp_path: Path) -> None:
    data = {"initializers": [{"name": "a", "target": "m:f", "after": []}]}
    path = tmp_path / "boot.json"
    path.write_text(json.dumps(data), encoding="utf-8")

    assert load_boot_config(path).initializers[0].name == "a"
    assert load_boot_config(json.dumps(data)).initializers[0].target == "m:f"
    assert load_boot_config(data).initializers[0].name == "a"


def test_hook_phase_must_be_a_wire_name() -> None:
    config = load_boot_config({"hooks": [{"phase": "to_prepare", "target": "m:f"}]})

    assert config.hooks[0].phase == "to_prepare"
    with pytest.raises(ConfigurationError):
        load_boot_config({"hooks": [{"phase": "TO_PREPARE", "target": "m:f"}]})


@pytest.mark.parametrize(
    "data",
    [
        {"hooks": [{"phase": "console", "target": "m:f"}]},
        {"hooks": [{"phase": "initialize", "target": "no-colon"}]},
        {"initializers": [{"name": "", "target": "m:f"}]},
        {"orchestrator": {"error_policy": "retry"}},
        {"orchestrator": {"unknown_option": True}},
        {"plugins": ["not a target"]},
    ],
)
def test_invalid_configuration_is_rejected(data) -> None:
    with pytest.raises(ConfigurationError):
        load_boot_config(data)


def test_unparseable_text_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        load_boot_config("{not json")
    with pytest.raises(ConfigurationError):
        load_boot_config("[[hooks]\n")


def test_missing_path_object_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_boot_config(tmp_path / "missing.toml")


def test_import_target(fixtures_module) -> None:
    assert import_target("boot_fixtures:hook") is fixtures_module.hook
    assert import_target("bootseq.plugins.demo:DemoPlugin") is DemoPlugin
    assert import_target("bootseq.plugins.demo:DemoPlugin.eager_load") is DemoPlugin.eager_load

    with pytest.raises(ConfigurationError):
        import_target("boot_fixtures:missing")
    with pytest.raises(ConfigurationError):
        import_target("no_such_module_xyz:thing")
    with pytest.raises(ConfigurationError):
        import_target("nocolon")


def test_build_orchestrator_registers_in_declaration_order(fixtures_module) -> None:
    orchestrator = build_orchestrator(TOML_CONFIG)

    assert orchestrator.settings.error_policy == "collect_all"
    assert orchestrator.initializers.names() == ["db", "cache"]
    assert orchestrator.resolve() == ["cache", "db"]

    orchestrator.run(None)

    assert fixtures_module.calls == ["hook", "cache", "db"]


def test_build_orchestrator_surfaces_unknown_references(fixtures_module) -> None:
    config = {
        "initializers": [
            {"name": "db", "target": "boot_fixtures:init_db", "after": ["nowhere"]},
        ]
    }

    with pytest.raises(UnknownInitializer):
        build_orchestrator(config)


def test_build_application_applies_plugins_then_declared(fixtures_module) -> None:
    config = {
        "plugins": ["bootseq.plugins.demo:DemoPlugin"],
        "settings": {"demo": {"demo_config": "override"}},
        "initializers": [
            {
                "name": "app.after_first",
                "target": "boot_fixtures:init_db",
                "after": ["demo.first_configuration"],
                "before": ["demo.second_configuration"],
            }
        ],
    }

    app, orchestrator = build_application(config, name="store")

    assert app.name == "store"
    assert [p.name for p in app.plugins] == ["demo"]
    assert app.config["demo"].demo_config == "override"
    assert orchestrator.notifications is app.notifications
    assert orchestrator.resolve() == [
        "demo.first_configuration",
        "demo.initialize",
        "app.after_first",
        "demo.second_configuration",
        "demo.third_configuration",
    ]


def test_build_application_rejects_non_plugins(fixtures_module) -> None:
    with pytest.raises(ConfigurationError):
        build_application({"plugins": ["boot_fixtures:not_a_plugin"]})
