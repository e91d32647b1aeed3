"""In-process instrumentation bus.

Code instruments a named block, and subscribers receive a timed
``Event`` once the block finishes. Subscribers may listen to every event
or to names matching a glob pattern (``"phase.*"``). A failing
subscriber is logged and skipped.
"""

import fnmatch
import logging
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

logger = logging.getLogger("bootseq.notifications")


@dataclass
class Event:
    """A finished instrumented block.

    Attributes:
        name: Event name, e.g. ``"phase.bootseq"``.
        payload: Data supplied by the instrumenting code; the block may
            add to it before it finishes.
        started: ``time.perf_counter()`` at block entry.
        finished: ``time.perf_counter()`` at block exit.
        transaction_id: Identifier shared by events from one instrument call.
    """

    name: str
    payload: Dict[str, Any] = field(default_factory=dict)
    started: float = 0.0
    finished: float = 0.0
    transaction_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def duration(self) -> float:
        """Duration in milliseconds."""
        return (self.finished - self.started) * 1000.0

    def __str__(self) -> str:
        return f"Event({self.name}, duration={self.duration:.2f}ms)"


EventHandler = Callable[[Event], None]


class Notifications:
    """Publish/subscribe bus for instrumentation events."""

    def __init__(self) -> None:
        # (subscription_id, pattern, handler, name)
        self._subscribers: List[Tuple[str, Optional[str], EventHandler, str]] = []
        self._lock = RLock()

    def subscribe(
        self,
        handler: EventHandler,
        pattern: Optional[str] = None,
        name: Optional[str] = None,
    ) -> str:
        """Subscribe to events.

        Args:
            handler: Callback invoked with each matching event.
            pattern: Optional glob on the event name; None matches all.
            name: Optional handler name for logging.

        Returns:
            str: Subscription ID that can be used to unsubscribe.
        """
        subscription_id = str(uuid.uuid4())
        handler_name = name or getattr(handler, "__name__", "anonymous")

        with self._lock:
            self._subscribers.append((subscription_id, pattern, handler, handler_name))
            logger.debug(
                "Handler %s subscribed to %s (id=%s)",
                handler_name,
                pattern or "*",
                subscription_id[:8],
            )
        return subscription_id

    def unsubscribe(self, subscription_id: str) -> bool:
        """Remove a subscription.

        Returns:
            bool: True if the subscription was found and removed.
        """
        with self._lock:
            for i, (sid, _, _, handler_name) in enumerate(self._subscribers):
                if sid == subscription_id:
                    del self._subscribers[i]
                    logger.debug("Handler %s unsubscribed (id=%s)", handler_name, sid[:8])
                    return True
        return False

    @contextmanager
    def instrument(self, name: str, payload: Optional[Dict[str, Any]] = None) -> Iterator[Dict[str, Any]]:
        """Time the enclosed block and publish an event when it exits.

        The payload dict is yielded so the block can enrich it. When the
        block raises, the exception type and message are added under
        ``"exception"`` and the exception propagates after publishing.
        """
        data: Dict[str, Any] = dict(payload or {})
        started = time.perf_counter()
        try:
            yield data
        except Exception as exc:
            data["exception"] = (type(exc).__name__, str(exc))
            raise
        finally:
            self.publish(Event(name=name, payload=data, started=started, finished=time.perf_counter()))

    def publish(self, event: Event) -> None:
        """Deliver ``event`` to every matching subscriber.

        Handlers run outside the lock.
        """
        with self._lock:
            snapshot = [
                (handler, handler_name)
                for _, pattern, handler, handler_name in self._subscribers
                if pattern is None or fnmatch.fnmatchcase(event.name, pattern)
            ]

        for handler, handler_name in snapshot:
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    "Subscriber %s failed for event %s: %s",
                    handler_name,
                    event.name,
                    e,
                    exc_info=True,
                )

    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)


__all__ = ["Event", "EventHandler", "Notifications"]
