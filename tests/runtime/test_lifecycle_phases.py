"""Tests for lifecycle phase definitions and the hook table."""

import pytest

from bootseq.runtime.errors import ConfigurationError, UnknownPhase
from bootseq.runtime.hooks import HookTable
from bootseq.runtime.lifecycle import INITIALIZATION_PHASE, PHASE_ORDER, LifecyclePhase, phases
from bootseq.runtime.orchestrator import LifecycleOrchestrator

EXPECTED_PHASES = [
    "before_configuration",
    "before_initialize",
    "initialize",
    "to_prepare",
    "before_eager_load",
    "after_initialize",
]


def test_phases_are_fixed_and_ordered() -> None:
    """phases() yields the fixed sequence of wire names."""
    assert list(phases()) == EXPECTED_PHASES
    assert [p.value for p in PHASE_ORDER] == EXPECTED_PHASES
    assert INITIALIZATION_PHASE is LifecyclePhase.INITIALIZE


def test_phases_sequence_is_restartable() -> None:
    """The same sequence object can be iterated, indexed and measured repeatedly."""
    seq = phases()

    assert list(seq) == EXPECTED_PHASES
    assert list(seq) == EXPECTED_PHASES
    assert len(seq) == 6
    assert seq[2] == "initialize"
    assert list(phases()) == EXPECTED_PHASES


def test_orchestrator_phases_can_be_iterated_twice() -> None:
    seq = LifecycleOrchestrator().phases()

    assert list(seq) == list(seq) == EXPECTED_PHASES


def test_parse_accepts_members_and_wire_names() -> None:
    assert LifecyclePhase.parse(LifecyclePhase.TO_PREPARE) is LifecyclePhase.TO_PREPARE
    assert LifecyclePhase.parse("to_prepare") is LifecyclePhase.TO_PREPARE
    assert str(LifecyclePhase.BEFORE_EAGER_LOAD) == "Before Eager Load"


@pytest.mark.parametrize(
    "bad", ["console", "", "after-initialize", "TO_PREPARE", "INITIALIZE", 3, None]
)
def test_parse_rejects_unknown_phases(bad) -> None:
    with pytest.raises(UnknownPhase) as excinfo:
        LifecyclePhase.parse(bad)

    assert isinstance(excinfo.value, ConfigurationError)
    assert "before_configuration" in str(excinfo.value)


def test_register_hook_rejects_member_names() -> None:
    orchestrator = LifecycleOrchestrator()

    with pytest.raises(UnknownPhase):
        orchestrator.register_hook("TO_PREPARE", lambda app: None)

    assert orchestrator.hooks.count() == 0


def test_hooks_run_in_registration_order_per_phase() -> None:
    """Hooks are listed per phase in the order they were registered."""
    table = HookTable()

    def h1(app):
        return None

    def h2(app):
        return None

    table.register("initialize", h1)
    table.register(LifecyclePhase.AFTER_INITIALIZE, h2)
    table.register("initialize", h2, name="second")
    table.register("initialize", h1)

    hooks = table.hooks_for("initialize")
    assert [hook.callback for hook in hooks] == [h1, h2, h1]
    assert [hook.name for hook in hooks] == [h1.__qualname__, "second", h1.__qualname__]
    assert table.count() == 4
    assert table.count("after_initialize") == 1
    assert table.hooks_for("to_prepare") == ()


def test_hook_registration_with_unknown_phase_does_not_mutate() -> None:
    table = HookTable()

    with pytest.raises(UnknownPhase):
        table.register("rake_tasks", lambda app: None)

    assert table.count() == 0


def test_hook_callback_must_be_callable() -> None:
    table = HookTable()

    with pytest.raises(TypeError):
        table.register("initialize", object())  # type: ignore[arg-type]
