"""Helpers for loading boot configuration from TOML/JSON sources.

This module provides `load_boot_config`, which accepts various
configuration sources:

* None -> default BootConfig
* dict -> BootConfig.from_dict
* Path / path-like string -> load .toml/.json from filesystem
* Inline JSON/TOML strings

and `build_orchestrator` / `build_application`, which import the
declared callback targets and register them in declaration order.
"""

from __future__ import annotations

import importlib
import json
import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from pydantic import ValidationError

from bootseq.app import Application
from bootseq.config.schema import BootConfig, OrchestratorSettings
from bootseq.notifications import Notifications
from bootseq.plugins.base import Plugin
from bootseq.runtime.errors import ConfigurationError
from bootseq.runtime.orchestrator import LifecycleOrchestrator

logger = logging.getLogger("bootseq.config.loader")

ConfigSource = Union[str, Path, Dict[str, Any], BootConfig, None]


def load_boot_config(source: ConfigSource) -> BootConfig:
    """Load BootConfig from various configuration sources.

    Args:
        source: One of:
            * None: returns BootConfig.default()
            * BootConfig: returned unchanged
            * dict: treated as already-parsed configuration mapping
            * str/Path: either a filesystem path to a .toml/.json file,
              or an inline TOML/JSON string (auto-detected)

    Returns:
        BootConfig instance.

    Raises:
        ConfigurationError: If the source cannot be parsed or validated.
    """
    if source is None:
        logger.debug("No config source provided; using default BootConfig")
        return BootConfig.default()

    if isinstance(source, BootConfig):
        return source

    if isinstance(source, dict):
        logger.debug("Loading BootConfig from provided dict")
        return _validate(source)

    if isinstance(source, (str, Path)):
        text, fmt = _read_source(source)
        data = _parse(text, fmt)
        if not isinstance(data, dict):
            raise ConfigurationError("Top-level configuration must be a mapping/dict")
        return _validate(data)

    raise TypeError(f"Unsupported config source type: {type(source)!r}")


def _read_source(source: Union[str, Path]) -> Tuple[str, str]:
    """Return ``(text, format)`` for a path or an inline string."""
    path = Path(source)
    is_file = False
    try:
        is_file = path.is_file()
    except OSError:
        # Inline strings can be too long to be valid paths
        is_file = False

    if is_file:
        text = path.read_text(encoding="utf-8")
        suffix = path.suffix.lower()
        if suffix in {".toml", ".tml"}:
            fmt = "toml"
        elif suffix == ".json":
            fmt = "json"
        else:
            fmt = _guess_format(text)
        logger.info("Loading configuration from file: %s (fmt=%s)", path, fmt)
        return text, fmt

    if isinstance(source, Path):
        raise ConfigurationError(f"Configuration file not found: {source}")

    text = str(source)
    fmt = _guess_format(text)
    logger.info("Loading configuration from inline %s string", fmt)
    return text, fmt


def _guess_format(text: str) -> str:
    # A leading "[" is either a JSON array or a TOML table header.
    stripped = text.lstrip()
    if stripped.startswith("{"):
        return "json"
    if stripped.startswith("["):
        return "auto"
    return "toml"


def _parse(text: str, fmt: str) -> Any:
    if fmt == "auto":
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            fmt = "toml"
    try:
        return json.loads(text) if fmt == "json" else tomllib.loads(text)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ConfigurationError(f"Cannot parse {fmt} configuration: {exc}") from exc


def _validate(data: Dict[str, Any]) -> BootConfig:
    try:
        return BootConfig.from_dict(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid boot configuration: {exc}") from exc


def import_target(target: str) -> Any:
    """Import ``package.module:attribute`` (attribute may be dotted).

    Raises:
        ConfigurationError: If the module or attribute cannot be found.
    """
    module_name, _, attr_path = target.partition(":")
    if not module_name or not attr_path:
        raise ConfigurationError(f"Invalid import target {target!r}")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError(f"Cannot import module {module_name!r}: {exc}") from exc

    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError as exc:
            raise ConfigurationError(f"{target!r}: no attribute {attr!r}") from exc
    return obj


def build_orchestrator(
    config: ConfigSource,
    notifications: Optional[Notifications] = None,
    settings: Optional[OrchestratorSettings] = None,
) -> LifecycleOrchestrator:
    """Create an orchestrator and register the declared hooks and initializers.

    Plugins are not applied here; see `build_application`.

    Args:
        config: Any source accepted by `load_boot_config`.
        notifications: Optional bus the orchestrator instruments phases on.
        settings: Overrides ``config.orchestrator`` when given.

    Returns:
        LifecycleOrchestrator in the configuring state.
    """
    boot_config = load_boot_config(config)
    orchestrator = LifecycleOrchestrator(
        settings=settings or boot_config.orchestrator,
        notifications=notifications,
    )
    _register_declared(orchestrator, boot_config)
    return orchestrator


def _register_declared(orchestrator: LifecycleOrchestrator, config: BootConfig) -> None:
    for hook in config.hooks:
        orchestrator.register_hook(hook.phase, import_target(hook.target), name=hook.name)
    for spec in config.initializers:
        orchestrator.register_initializer(
            spec.name,
            import_target(spec.target),
            before=spec.before,
            after=spec.after,
        )
    logger.debug(
        "Registered %d declared hook(s) and %d initializer(s)",
        len(config.hooks),
        len(config.initializers),
    )


def build_application(
    config: ConfigSource,
    name: str = "app",
    settings: Optional[OrchestratorSettings] = None,
) -> Tuple[Application, LifecycleOrchestrator]:
    """Create an application and an orchestrator ready to boot.

    Order of registration: plugins (in declaration order), then declared
    hooks and initializers, so declared initializers may constrain
    themselves against plugin initializers.

    Returns:
        ``(application, orchestrator)``; call ``application.boot(orchestrator)``.
    """
    boot_config = load_boot_config(config)
    app = Application(name=name)
    for group, values in boot_config.settings.items():
        app.config.update(group, values)

    orchestrator = LifecycleOrchestrator(
        settings=settings or boot_config.orchestrator,
        notifications=app.notifications,
    )

    for target in boot_config.plugins:
        plugin_cls = import_target(target)
        if not (isinstance(plugin_cls, type) and issubclass(plugin_cls, Plugin)):
            raise ConfigurationError(f"{target!r} is not a Plugin subclass")
        app.add_plugin(plugin_cls(), orchestrator)

    _register_declared(orchestrator, boot_config)
    return app, orchestrator


__all__ = [
    "ConfigSource",
    "load_boot_config",
    "import_target",
    "build_orchestrator",
    "build_application",
]
