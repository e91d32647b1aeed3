"""Host application object passed to every lifecycle callback.

The orchestrator never looks inside the application; it only hands it
to hooks and initializers, which use it to read configuration, register
middleware and subscribe to notifications.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterator, List, Mapping, Optional

from bootseq.middleware import Endpoint, MiddlewareStack, Request, RequestProcessor, Response
from bootseq.notifications import Notifications
from bootseq.runtime.errors import ConfigurationError
from bootseq.runtime.orchestrator import LifecycleOrchestrator, RunState
from bootseq.runtime.report import RunReport

if TYPE_CHECKING:  # pragma: no cover
    from bootseq.plugins.base import Plugin

logger = logging.getLogger("bootseq.app")


class OptionGroup(dict):
    """Dict with attribute access, one per plugin."""

    def __getattr__(self, key: str) -> Any:
        try:
            return self[key]
        except KeyError as exc:
            raise AttributeError(key) from exc

    def __setattr__(self, key: str, value: Any) -> None:
        self[key] = value


class Settings:
    """Application configuration grouped by plugin name.

    Example:
        settings.group("demo").demo_config  # -> "bomb"
    """

    def __init__(self) -> None:
        self._groups: Dict[str, OptionGroup] = {}

    def group(self, name: str) -> OptionGroup:
        """Return the option group ``name``, creating it if needed."""
        return self._groups.setdefault(name, OptionGroup())

    def merge_defaults(self, name: str, defaults: Mapping[str, Any]) -> OptionGroup:
        """Fill missing options of ``name`` without overwriting existing ones."""
        group = self.group(name)
        for key, value in defaults.items():
            group.setdefault(key, value)
        return group

    def update(self, name: str, values: Mapping[str, Any]) -> OptionGroup:
        group = self.group(name)
        group.update(values)
        return group

    def __getitem__(self, name: str) -> OptionGroup:
        return self._groups[name]

    def __contains__(self, name: object) -> bool:
        return name in self._groups

    def __iter__(self) -> Iterator[str]:
        return iter(self._groups)

    def as_dict(self) -> Dict[str, Dict[str, Any]]:
        return {name: dict(group) for name, group in self._groups.items()}


def _not_found(request: Request) -> Response:
    return Response(status=404, headers={"Content-Type": "text/plain"}, body=b"Not Found")


class Application:
    """
    Host application and shared context for lifecycle callbacks.

    Attributes:
        name: Application name for logs
        config: Per-plugin settings
        middleware: Ordered middleware stack
        notifications: Instrumentation bus
        plugins: Plugins applied to this application, in order
        orchestrator: Orchestrator the application was booted with
    """

    def __init__(
        self,
        name: str = "app",
        endpoint: Optional[Callable[[Request], Response]] = None,
        notifications: Optional[Notifications] = None,
    ) -> None:
        self.name = name
        self.config = Settings()
        self.middleware = MiddlewareStack()
        self.notifications = notifications or Notifications()
        self.plugins: List["Plugin"] = []
        self.orchestrator: Optional[LifecycleOrchestrator] = None
        self._endpoint: RequestProcessor = Endpoint(endpoint or _not_found)
        self._chain: Optional[RequestProcessor] = None

    def add_plugin(self, plugin: "Plugin", orchestrator: LifecycleOrchestrator) -> None:
        """Apply a plugin: config defaults, middleware, then its registrations."""
        self.config.merge_defaults(plugin.name, plugin.config_defaults())
        for klass in plugin.middleware:
            self.middleware.use(klass)
        plugin.setup(orchestrator, self)
        self.plugins.append(plugin)
        logger.info("Plugin %s applied to %s", plugin.name, self.name)

    @property
    def booted(self) -> bool:
        return self.orchestrator is not None and self.orchestrator.state is RunState.RAN

    def boot(self, orchestrator: LifecycleOrchestrator) -> RunReport:
        """Run the lifecycle with this application as the shared context."""
        self.orchestrator = orchestrator
        if orchestrator.notifications is None:
            orchestrator.notifications = self.notifications
        logger.info("Booting %s", self.name)
        return orchestrator.run(self)

    def call(self, request: Request) -> Response:
        """Process ``request`` through the middleware chain.

        Raises:
            ConfigurationError: If the application has not booted.
        """
        if not self.booted:
            raise ConfigurationError(f"Application {self.name!r} has not booted")
        if self._chain is None:
            self._chain = self.middleware.build(self._endpoint)
            logger.debug("Middleware chain built with %d middleware", len(self.middleware))
        return self._chain.process(request)


__all__ = ["Application", "OptionGroup", "Settings"]
