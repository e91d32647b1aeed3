"""Configuration schema definitions using Pydantic for validation.

This module provides strongly-typed configuration for the orchestrator
and for declarative boot files (hooks, initializers and plugins given as
``module:attribute`` import targets). Using Pydantic ensures
configuration errors are caught early with clear error messages.
"""

import re
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from bootseq.runtime.errors import UnknownPhase
from bootseq.runtime.lifecycle import LifecyclePhase

ErrorPolicy = Literal["fail_fast", "collect_all"]

_TARGET_RE = re.compile(r"^[A-Za-z_][\w.]*:[A-Za-z_][\w.]*$")


def _validate_target(value: str) -> str:
    if not _TARGET_RE.match(value):
        raise ValueError(
            f"Invalid callback target '{value}'. Expected 'package.module:attribute'"
        )
    return value


class OrchestratorSettings(BaseModel):
    """Runtime behaviour of a LifecycleOrchestrator.

    Attributes:
        error_policy: ``fail_fast`` aborts on the first failing callback;
            ``collect_all`` runs everything and reports all failures.
        eager_load: Whether registered eager-load namespaces are loaded
            after the before_eager_load hooks.
        log_callbacks: Whether each callback firing is logged at INFO.
    """

    error_policy: ErrorPolicy = "fail_fast"
    eager_load: bool = True
    log_callbacks: bool = True

    model_config = {"extra": "forbid"}


class HookSpec(BaseModel):
    """A hook declared in a boot file.

    Attributes:
        phase: Lifecycle phase wire name.
        target: Import target of the callback.
        name: Optional hook name for logs and errors.
    """

    phase: str
    target: str
    name: Optional[str] = None

    @field_validator("phase")
    @classmethod
    def validate_phase(cls, v: str) -> str:
        """Only the fixed wire names are accepted."""
        try:
            return LifecyclePhase.parse(v).value
        except UnknownPhase as exc:
            raise ValueError(str(exc)) from exc

    @field_validator("target")
    @classmethod
    def validate_target(cls, v: str) -> str:
        return _validate_target(v)


class InitializerSpec(BaseModel):
    """An initializer declared in a boot file.

    Attributes:
        name: Unique initializer name.
        target: Import target of the callback.
        before: Initializers this one must precede.
        after: Initializers this one must follow.
    """

    name: str = Field(min_length=1)
    target: str
    before: List[str] = Field(default_factory=list)
    after: List[str] = Field(default_factory=list)

    @field_validator("before", "after", mode="before")
    @classmethod
    def coerce_names(cls, v: Any) -> Any:
        """Accept a single name as shorthand for a one-element list."""
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("target")
    @classmethod
    def validate_target(cls, v: str) -> str:
        return _validate_target(v)


class BootConfig(BaseModel):
    """Top-level declarative boot configuration.

    Attributes:
        orchestrator: Orchestrator behaviour.
        plugins: Import targets of Plugin classes, applied in order.
        hooks: Hooks registered in declaration order.
        initializers: Initializers registered in declaration order.
        settings: Per-plugin option overrides, keyed by plugin name.
    """

    orchestrator: OrchestratorSettings = Field(default_factory=OrchestratorSettings)
    plugins: List[str] = Field(default_factory=list)
    hooks: List[HookSpec] = Field(default_factory=list)
    initializers: List[InitializerSpec] = Field(default_factory=list)
    settings: Dict[str, Dict[str, Any]] = Field(default_factory=dict)

    @field_validator("plugins")
    @classmethod
    def validate_plugins(cls, v: List[str]) -> List[str]:
        for target in v:
            _validate_target(target)
        return v

    @classmethod
    def default(cls) -> "BootConfig":
        """Empty configuration with default orchestrator settings."""
        return cls()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BootConfig":
        return cls.model_validate(data)
