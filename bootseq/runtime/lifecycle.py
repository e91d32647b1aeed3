"""Lifecycle phase definitions for application boot.

This module defines the canonical phases every boot follows:
BeforeConfiguration→BeforeInitialize→Initialize→ToPrepare→BeforeEagerLoad→AfterInitialize.
"""

from __future__ import annotations

from enum import Enum
from typing import Tuple, Union

from bootseq.runtime.errors import UnknownPhase


class LifecyclePhase(Enum):
    """Boot phases in execution order.

    - BEFORE_CONFIGURATION: Application object exists, configuration not yet loaded
    - BEFORE_INITIALIZE: Configuration loaded, initializers not yet run
    - INITIALIZE: Ordered initializers run (the designated initialization phase)
    - TO_PREPARE: After all initializers, before eager loading
    - BEFORE_EAGER_LOAD: Directly before eager-load namespaces are loaded
    - AFTER_INITIALIZE: Boot finished
    """

    BEFORE_CONFIGURATION = "before_configuration"
    BEFORE_INITIALIZE = "before_initialize"
    INITIALIZE = "initialize"
    TO_PREPARE = "to_prepare"
    BEFORE_EAGER_LOAD = "before_eager_load"
    AFTER_INITIALIZE = "after_initialize"

    def __str__(self) -> str:
        """Return human-readable phase name.

        Returns:
            str: Phase name in title case.
        """
        return self.name.replace("_", " ").title()

    @classmethod
    def parse(cls, phase: Union["LifecyclePhase", str]) -> "LifecyclePhase":
        """Coerce a phase member or wire name into a LifecyclePhase.

        Args:
            phase: Enum member or wire name (``"to_prepare"``). Member
                names such as ``"TO_PREPARE"`` are not phase names.

        Returns:
            LifecyclePhase: Matching member.

        Raises:
            UnknownPhase: If ``phase`` is not one of the fixed phases.
        """
        if isinstance(phase, cls):
            return phase
        if isinstance(phase, str):
            try:
                return cls(phase)
            except ValueError:
                pass
        raise UnknownPhase(phase, known=PHASE_NAMES)


INITIALIZATION_PHASE = LifecyclePhase.INITIALIZE

PHASE_ORDER: Tuple[LifecyclePhase, ...] = tuple(LifecyclePhase)

PHASE_NAMES: Tuple[str, ...] = tuple(phase.value for phase in PHASE_ORDER)


def phases() -> Tuple[str, ...]:
    """Fixed phase names in execution order.

    The result is an immutable sequence; iterating it again starts over.
    """
    return PHASE_NAMES


__all__ = ["LifecyclePhase", "INITIALIZATION_PHASE", "PHASE_ORDER", "PHASE_NAMES", "phases"]
