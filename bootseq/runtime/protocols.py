"""
Protocol definitions for objects the orchestrator calls into.

Protocols keep the orchestrator decoupled from concrete plugin and host
classes and make them easy to stub in tests.
"""

from typing import Any, Protocol, runtime_checkable

from bootseq.runtime.tasks import TaskRegistry


@runtime_checkable
class EagerLoadable(Protocol):
    """Namespace loaded eagerly after the before_eager_load hooks.

    Example:
        class Models:
            def eager_load(self) -> None:
                import myapp.models  # noqa: F401
    """

    def eager_load(self) -> Any:
        """Load everything the namespace would otherwise load lazily."""
        ...


class TaskLoader(Protocol):
    """Callable that defines tasks on a registry."""

    def __call__(self, registry: TaskRegistry) -> Any:
        ...
