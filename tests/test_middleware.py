"""Tests for the middleware stack."""

import pytest

from bootseq.middleware import Endpoint, Middleware, MiddlewareStack, Request, Response
from bootseq.runtime.errors import ConfigurationError


def _tagging(tag: str):
    class Tag(Middleware):
        def process(self, request: Request) -> Response:
            request.headers.setdefault("X-Trail", "")
            request.headers["X-Trail"] += f">{tag}"
            response = self.app.process(request)
            response.headers["X-Trail"] = response.headers.get("X-Trail", "") + f"<{tag}"
            return response

    Tag.__name__ = f"Tag{tag}"
    return Tag


def _echo(request: Request) -> Response:
    return Response(status=200, headers={"X-Trail": request.headers.get("X-Trail", "")})


def test_first_used_middleware_is_outermost() -> None:
    a, b, c = _tagging("a"), _tagging("b"), _tagging("c")
    stack = MiddlewareStack()
    stack.use(a)
    stack.use(b)
    stack.use(c)

    response = stack.build(Endpoint(_echo)).process(Request())

    assert response.headers["X-Trail"] == ">a>b>c<c<b<a"
    assert list(stack) == [a, b, c]


def test_insert_before_and_after() -> None:
    a, b, c, d = (_tagging(t) for t in "abcd")
    stack = MiddlewareStack()
    stack.use(a)
    stack.use(c)
    stack.insert_before(c, b)
    stack.insert_after(c, d)

    assert list(stack) == [a, b, c, d]


def test_delete_and_unknown_target() -> None:
    a, b = _tagging("a"), _tagging("b")
    stack = MiddlewareStack()
    stack.use(a)
    stack.delete(a)

    assert len(stack) == 0
    assert a not in stack
    with pytest.raises(ConfigurationError):
        stack.insert_before(a, b)
    with pytest.raises(ConfigurationError):
        stack.delete(b)


def test_constructor_arguments_are_forwarded() -> None:
    class Header(Middleware):
        def __init__(self, app, name, value="on"):
            super().__init__(app)
            self.name = name
            self.value = value

        def process(self, request: Request) -> Response:
            response = self.app.process(request)
            response.headers[self.name] = self.value
            return response

    stack = MiddlewareStack()
    stack.use(Header, "X-One")
    stack.use(Header, "X-Two", value="2")

    response = stack.build(Endpoint(_echo)).process(Request())

    assert response.headers["X-One"] == "on"
    assert response.headers["X-Two"] == "2"


def test_empty_stack_returns_endpoint() -> None:
    endpoint = Endpoint(_echo)

    assert MiddlewareStack().build(endpoint) is endpoint
