"""Tests for the instrumentation bus."""

import logging

import pytest

from bootseq.notifications import Event, Notifications


def test_instrument_publishes_timed_event() -> None:
    bus = Notifications()
    received = []
    bus.subscribe(received.append)

    with bus.instrument("render.view", {"template": "index"}) as payload:
        payload["rows"] = 3

    assert len(received) == 1
    event = received[0]
    assert isinstance(event, Event)
    assert event.name == "render.view"
    assert event.payload == {"template": "index", "rows": 3}
    assert event.finished >= event.started
    assert event.duration >= 0


def test_pattern_subscriptions_filter_by_name() -> None:
    bus = Notifications()
    phases, everything = [], []
    bus.subscribe(lambda e: phases.append(e.name), pattern="phase.*")
    bus.subscribe(lambda e: everything.append(e.name))

    bus.publish(Event(name="phase.bootseq"))
    bus.publish(Event(name="sql.query"))

    assert phases == ["phase.bootseq"]
    assert everything == ["phase.bootseq", "sql.query"]


def test_unsubscribe() -> None:
    bus = Notifications()
    received = []
    sid = bus.subscribe(received.append)

    assert bus.unsubscribe(sid) is True
    assert bus.unsubscribe(sid) is False
    bus.publish(Event(name="x"))

    assert received == []
    assert bus.subscriber_count() == 0


def test_failing_subscriber_does_not_break_publisher(caplog: pytest.LogCaptureFixture) -> None:
    bus = Notifications()
    received = []

    def broken(event: Event) -> None:
        raise ValueError("bad subscriber")

    bus.subscribe(broken, name="broken")
    bus.subscribe(received.append)

    with caplog.at_level(logging.ERROR, logger="bootseq.notifications"):
        bus.publish(Event(name="x"))

    assert [e.name for e in received] == ["x"]
    assert "broken" in caplog.text


def test_instrument_reraises_and_records_exception() -> None:
    bus = Notifications()
    received = []
    bus.subscribe(received.append)

    with pytest.raises(KeyError):
        with bus.instrument("lookup"):
            raise KeyError("missing")

    assert received[0].payload["exception"][0] == "KeyError"
