"""Configuration schema and validation for bootseq."""

from .schema import (
    BootConfig,
    ErrorPolicy,
    HookSpec,
    InitializerSpec,
    OrchestratorSettings,
)

__all__ = [
    "BootConfig",
    "ErrorPolicy",
    "HookSpec",
    "InitializerSpec",
    "OrchestratorSettings",
]
