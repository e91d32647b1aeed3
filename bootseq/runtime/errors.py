"""Exception hierarchy for lifecycle registration and execution.

Registration errors (unknown phase, duplicate or unknown initializer,
closed registry) are raised immediately at the call site. Structural
errors (cycles) surface when the initializer graph is resolved, and
callback failures surface from ``run()`` wrapped with the phase and
callback name that produced them.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence


# =============================================================================
# Base classes
# =============================================================================


class LifecycleError(Exception):
    """Base class for every error raised by the lifecycle orchestrator."""


class ConfigurationError(LifecycleError):
    """Registration or configuration misuse.

    Raised synchronously at registration time; never deferred to ``run()``.
    """


# =============================================================================
# Registration errors
# =============================================================================


class UnknownPhase(ConfigurationError):
    """A hook was registered against a phase outside the fixed sequence."""

    def __init__(self, phase: object, known: Sequence[str] = ()) -> None:
        self.phase = phase
        self.known = tuple(known)
        message = f"Unknown lifecycle phase {phase!r}"
        if self.known:
            message += f" (expected one of: {', '.join(self.known)})"
        super().__init__(message)


class DuplicateName(ConfigurationError):
    """An initializer (or task) with the same name is already registered."""

    def __init__(self, name: str, kind: str = "initializer") -> None:
        self.name = name
        self.kind = kind
        super().__init__(f"{kind.capitalize()} {name!r} is already registered")


class UnknownInitializer(ConfigurationError):
    """A before/after constraint names an initializer that does not exist."""

    def __init__(self, name: str, missing: Iterable[str]) -> None:
        self.name = name
        self.missing = tuple(sorted(missing))
        super().__init__(
            f"Initializer {name!r} references unknown initializer(s): "
            f"{', '.join(self.missing)}"
        )


class RegistrationClosed(ConfigurationError):
    """Registration attempted after the lifecycle started running."""


# =============================================================================
# Resolution and execution errors
# =============================================================================


class CyclicDependency(LifecycleError):
    """Initializer constraints cannot be satisfied by any linear order.

    Attributes:
        members: Names of every initializer caught in a cycle, in
            registration order.
        cycle: One concrete cycle as a path, e.g. ``["a", "b"]`` for
            ``a -> b -> a``.
    """

    def __init__(self, members: Sequence[str], cycle: Sequence[str] = ()) -> None:
        self.members = list(members)
        self.cycle = list(cycle)
        if self.cycle:
            path = " -> ".join(self.cycle + [self.cycle[0]])
            message = f"Cyclic initializer dependency: {path}"
        else:
            message = "Cyclic initializer dependency"
        if self.members:
            message += f" (members: {', '.join(self.members)})"
        super().__init__(message)


class CallbackError(LifecycleError):
    """A hook or initializer callback raised.

    The original exception is chained as ``__cause__`` and exposed as
    ``cause``.

    Attributes:
        phase: Wire name of the phase the callback belongs to, or the
            auxiliary hook kind (``"console"``, ``"tasks"``).
        name: Hook or initializer name.
        kind: ``"hook"``, ``"initializer"`` or ``"eager_load"``.
    """

    def __init__(
        self,
        phase: str,
        name: str,
        cause: BaseException,
        kind: str = "hook",
    ) -> None:
        self.phase = phase
        self.name = name
        self.kind = kind
        self.cause = cause
        super().__init__(
            f"{kind.capitalize()} {name!r} failed during {phase}: "
            f"{type(cause).__name__}: {cause}"
        )


class CallbackErrorGroup(LifecycleError):
    """Several callbacks failed while running in collect-all mode."""

    def __init__(self, errors: List[CallbackError]) -> None:
        self.errors = list(errors)
        names = ", ".join(f"{e.phase}/{e.name}" for e in self.errors)
        super().__init__(f"{len(self.errors)} callback(s) failed: {names}")


class AlreadyRun(LifecycleError):
    """``run()`` was called more than once on the same orchestrator."""

    def __init__(self, state: Optional[str] = None) -> None:
        message = "Lifecycle orchestrator is single-shot and has already run"
        if state:
            message += f" (state={state})"
        super().__init__(message)


__all__ = [
    "LifecycleError",
    "ConfigurationError",
    "UnknownPhase",
    "DuplicateName",
    "UnknownInitializer",
    "RegistrationClosed",
    "CyclicDependency",
    "CallbackError",
    "CallbackErrorGroup",
    "AlreadyRun",
]
