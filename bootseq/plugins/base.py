"""Base class for plugins that extend the application boot.

A plugin contributes configuration defaults and middleware, and
registers hooks, initializers and auxiliary hooks on the orchestrator
owned by the host's startup routine.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Dict, Tuple, Type

from bootseq.runtime.orchestrator import LifecycleOrchestrator

if TYPE_CHECKING:  # pragma: no cover
    from bootseq.app import Application


class Plugin:
    """Extension point for application boot.

    Attributes:
        name: Option group and initializer namespace of the plugin.
        middleware: Middleware classes appended to the application stack.

    Example:
        class CachePlugin(Plugin):
            name = "cache"

            def config_defaults(self):
                return {"ttl": 60}

            def setup(self, orchestrator, app):
                orchestrator.register_initializer("cache.connect", self.connect)
    """

    name: ClassVar[str] = "plugin"
    middleware: ClassVar[Tuple[Type[Any], ...]] = ()

    def config_defaults(self) -> Dict[str, Any]:
        """Options merged into ``app.config.group(self.name)`` if absent."""
        return {}

    def setup(self, orchestrator: LifecycleOrchestrator, app: "Application") -> None:
        """Register hooks and initializers. Called once before boot."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
