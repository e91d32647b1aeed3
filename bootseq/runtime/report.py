"""Result types produced by a lifecycle run.

- StepKind: What kind of callback a step invoked
- StepStatus: Outcome of a single step
- StepRecord: Immutable record of one executed callback
- RunReport: Everything that happened during ``run()``
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from bootseq.runtime.errors import CallbackError


class StepKind(Enum):
    """Kinds of callbacks the orchestrator invokes."""

    HOOK = "hook"
    INITIALIZER = "initializer"
    EAGER_LOAD = "eager_load"
    CONSOLE = "console"
    TASKS = "tasks"


class StepStatus(Enum):
    """Outcome of a step."""

    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class StepRecord:
    """One executed callback.

    Attributes:
        phase: Phase wire name (or auxiliary kind for console/tasks).
        name: Hook or initializer name.
        kind: Kind of callback.
        status: Whether it completed or failed.
        duration: Wall time in seconds.
        error: Wrapped error when the step failed.
    """

    phase: str
    name: str
    kind: StepKind
    status: StepStatus
    duration: float = 0.0
    error: Optional[CallbackError] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "phase": self.phase,
            "name": self.name,
            "kind": self.kind.value,
            "status": self.status.value,
            "duration_ms": int(self.duration * 1000),
            "error": str(self.error) if self.error else None,
        }


@dataclass
class RunReport:
    """Summary of a lifecycle run.

    Attributes:
        steps: Executed callbacks in execution order.
        phases_completed: Phase names that ran to completion.
        initializer_order: Resolved initializer order (empty until the
            initialization phase is reached).
        errors: Failures collected during the run.
        duration: Total wall time in seconds.
    """

    steps: List[StepRecord] = field(default_factory=list)
    phases_completed: List[str] = field(default_factory=list)
    initializer_order: List[str] = field(default_factory=list)
    errors: List[CallbackError] = field(default_factory=list)
    duration: float = 0.0

    @property
    def success(self) -> bool:
        return not self.errors

    def steps_for(self, phase: str) -> List[StepRecord]:
        return [step for step in self.steps if step.phase == phase]

    @property
    def last_completed(self) -> Optional[StepRecord]:
        """Last step that completed successfully, if any."""
        for step in reversed(self.steps):
            if step.status is StepStatus.COMPLETED:
                return step
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "success": self.success,
            "duration_ms": int(self.duration * 1000),
            "phases_completed": list(self.phases_completed),
            "initializer_order": list(self.initializer_order),
            "steps": [step.to_dict() for step in self.steps],
            "errors": [str(error) for error in self.errors],
        }


__all__ = ["StepKind", "StepStatus", "StepRecord", "RunReport"]
