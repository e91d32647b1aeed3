"""Ordered middleware stack owned by the host application.

Initializers register middleware classes on the stack; the host builds
the chain once boot has finished. The first middleware ``use``d is the
outermost wrapper, so it sees the request first and the response last.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Protocol, Tuple, Type, runtime_checkable

from bootseq.runtime.errors import ConfigurationError

logger = logging.getLogger("bootseq.middleware")


@dataclass
class Request:
    """Minimal request passed through the chain."""

    path: str = "/"
    method: str = "GET"
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""


@dataclass
class Response:
    """Minimal response returned through the chain."""

    status: int = 200
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""


@runtime_checkable
class RequestProcessor(Protocol):
    """Anything that turns a request into a response."""

    def process(self, request: Request) -> Response:
        ...


class Middleware:
    """Base class for middleware wrapping the next processor.

    Subclasses override ``process`` and delegate to ``self.app``.
    """

    def __init__(self, app: RequestProcessor) -> None:
        self.app = app

    def process(self, request: Request) -> Response:
        return self.app.process(request)


class Endpoint:
    """Adapts a plain ``request -> response`` callable to RequestProcessor."""

    def __init__(self, handler: Callable[[Request], Response]) -> None:
        self.handler = handler

    def process(self, request: Request) -> Response:
        return self.handler(request)


MiddlewareEntry = Tuple[Type[Any], Tuple[Any, ...], Dict[str, Any]]


class MiddlewareStack:
    """Ordered list of middleware classes with their construction arguments."""

    def __init__(self) -> None:
        self._entries: List[MiddlewareEntry] = []

    def __iter__(self) -> Iterator[Type[Any]]:
        return (klass for klass, _, _ in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, klass: object) -> bool:
        return any(entry[0] is klass for entry in self._entries)

    def _index(self, klass: Type[Any]) -> int:
        for index, (existing, _, _) in enumerate(self._entries):
            if existing is klass:
                return index
        raise ConfigurationError(f"Middleware {klass!r} is not in the stack")

    def use(self, klass: Type[Any], *args: Any, **kwargs: Any) -> None:
        """Append ``klass`` as the innermost middleware so far."""
        self._entries.append((klass, args, kwargs))
        logger.debug("Middleware %s appended", klass.__name__)

    def insert_before(self, target: Type[Any], klass: Type[Any], *args: Any, **kwargs: Any) -> None:
        """Insert ``klass`` directly outside ``target``."""
        self._entries.insert(self._index(target), (klass, args, kwargs))
        logger.debug("Middleware %s inserted before %s", klass.__name__, target.__name__)

    def insert_after(self, target: Type[Any], klass: Type[Any], *args: Any, **kwargs: Any) -> None:
        """Insert ``klass`` directly inside ``target``."""
        self._entries.insert(self._index(target) + 1, (klass, args, kwargs))
        logger.debug("Middleware %s inserted after %s", klass.__name__, target.__name__)

    def delete(self, klass: Type[Any]) -> None:
        del self._entries[self._index(klass)]
        logger.debug("Middleware %s removed", klass.__name__)

    def build(self, endpoint: RequestProcessor) -> RequestProcessor:
        """Wrap ``endpoint`` so the first registered middleware is outermost."""
        app = endpoint
        for klass, args, kwargs in reversed(self._entries):
            app = klass(app, *args, **kwargs)
        return app


__all__ = [
    "Request",
    "Response",
    "RequestProcessor",
    "Middleware",
    "Endpoint",
    "MiddlewareStack",
]
