"""Demonstration plugin that logs every boot stage it can hook into.

It registers a configuration default, a middleware that stamps a header
on every response, a hook on each lifecycle phase, ordered initializers,
a notification subscriber, a console hook and a task loader.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List

from bootseq.middleware import Middleware, Request, Response
from bootseq.notifications import Event
from bootseq.plugins.base import Plugin
from bootseq.runtime.lifecycle import LifecyclePhase
from bootseq.runtime.orchestrator import LifecycleOrchestrator
from bootseq.runtime.tasks import TaskRegistry

if TYPE_CHECKING:  # pragma: no cover
    from bootseq.app import Application

logger = logging.getLogger("bootseq.plugins.demo")


class BombMiddleware(Middleware):
    """Adds ``Bomb: Bang`` to every response."""

    def process(self, request: Request) -> Response:
        logger.info("use bomb middleware")
        response = self.app.process(request)
        response.headers["Bomb"] = "Bang"
        return response


class DemoPlugin(Plugin):
    """Logs a message at every stage of the boot sequence.

    ``events`` records what fired, in order, so hosts and tests can see
    the sequence without parsing logs.
    """

    name = "demo"
    middleware = (BombMiddleware,)

    def __init__(self) -> None:
        self.events: List[str] = []
        self.notifications_seen: List[str] = []

    def config_defaults(self) -> Dict[str, Any]:
        return {"demo_config": "bomb"}

    def _record(self, message: str) -> None:
        self.events.append(message)
        logger.info(message)

    def setup(self, orchestrator: LifecycleOrchestrator, app: "Application") -> None:
        for phase in LifecyclePhase:
            orchestrator.register_hook(
                phase,
                lambda app, message=phase.value: self._record(message),
                name=f"demo.{phase.value}",
            )

        orchestrator.register_initializer(
            "demo.first_configuration", lambda app: self._record("initializer first")
        )
        orchestrator.register_initializer(
            "demo.third_configuration", lambda app: self._record("initializer third")
        )
        orchestrator.register_initializer(
            "demo.second_configuration",
            lambda app: self._record("initializer second"),
            before=["demo.third_configuration"],
        )
        orchestrator.register_initializer("demo.initialize", self.subscribe_notifications)

        orchestrator.register_eager_load_namespace(self)
        orchestrator.register_console_hook(lambda app: self._record("in console"), name="demo.console")
        orchestrator.register_task_loader(self.define_tasks, name="demo.tasks")

    def subscribe_notifications(self, app: "Application") -> None:
        """Log every notification published on the application bus."""

        def on_event(event: Event) -> None:
            self.notifications_seen.append(event.name)
            logger.info("Got notification: %s %s", event, event.payload)

        app.notifications.subscribe(on_event, name="demo.notifications")
        self._record("subscribed to notifications")

    def eager_load(self) -> None:
        self._record("eager_load")

    def define_tasks(self, registry: TaskRegistry) -> None:
        registry.define(
            "demo:hello",
            lambda app: self._record(f"hello from {app.name}"),
            description="Print a greeting from the demo plugin",
        )


__all__ = ["BombMiddleware", "DemoPlugin"]
