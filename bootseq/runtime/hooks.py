"""Per-phase hook table.

Hooks are plain callables bound to a lifecycle phase. Within a phase
they run in registration order; the same callable may be registered
more than once. There is no removal operation.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from bootseq.runtime.lifecycle import LifecyclePhase

logger = logging.getLogger("bootseq.runtime.hooks")

Callback = Callable[[Any], Any]


def callback_name(callback: Callable[..., Any]) -> str:
    """Best-effort readable name for a callable."""
    return getattr(callback, "__qualname__", None) or getattr(
        callback, "__name__", repr(callback)
    )


@dataclass(frozen=True)
class Hook:
    """A callback bound to a phase.

    Attributes:
        phase: Phase the hook runs in.
        callback: Callable invoked with the application context.
        name: Name used in logs and errors.
        position: Global registration index.
    """

    phase: LifecyclePhase
    callback: Callback
    name: str
    position: int

    def __str__(self) -> str:
        return f"Hook({self.phase.value}, name={self.name})"


class HookTable:
    """Ordered per-phase hook lists."""

    def __init__(self) -> None:
        self._hooks: Dict[LifecyclePhase, List[Hook]] = defaultdict(list)
        self._counter = 0

    def register(
        self,
        phase: Union[LifecyclePhase, str],
        callback: Callback,
        name: Optional[str] = None,
    ) -> Hook:
        """Append a hook to the list for ``phase``.

        Args:
            phase: Phase member or wire name.
            callback: Callable receiving the application context.
            name: Optional name for logging; defaults to the callable's
                qualified name.

        Returns:
            Hook: The registered hook.

        Raises:
            UnknownPhase: If ``phase`` is not a lifecycle phase.
            TypeError: If ``callback`` is not callable.
        """
        phase_enum = LifecyclePhase.parse(phase)
        if not callable(callback):
            raise TypeError(f"Hook callback must be callable, got {callback!r}")

        hook = Hook(
            phase=phase_enum,
            callback=callback,
            name=name or callback_name(callback),
            position=self._counter,
        )
        self._counter += 1
        self._hooks[phase_enum].append(hook)
        logger.debug("Hook %s registered for %s", hook.name, phase_enum.value)
        return hook

    def hooks_for(self, phase: Union[LifecyclePhase, str]) -> Tuple[Hook, ...]:
        """Snapshot of hooks registered for ``phase`` in registration order."""
        return tuple(self._hooks.get(LifecyclePhase.parse(phase), ()))

    def count(self, phase: Optional[Union[LifecyclePhase, str]] = None) -> int:
        """Number of hooks, for one phase or overall."""
        if phase is None:
            return sum(len(hooks) for hooks in self._hooks.values())
        return len(self._hooks.get(LifecyclePhase.parse(phase), ()))


__all__ = ["Callback", "Hook", "HookTable", "callback_name"]
