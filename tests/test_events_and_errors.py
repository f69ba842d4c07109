import pytest

from dlcgate.errors import (
    BackendFailedError,
    BackendUnavailableError,
    ContentGatedError,
    ContentLoadError,
    DlcGateError,
    EntitlementError,
    LaunchFailedError,
    NotOwnedError,
    describe_error,
)
from dlcgate.events import ContentBlocked, EventBus, OwnershipChanged, TimeWarning


def test_subscribe_emit_unsubscribe_in_order():
    bus = EventBus()
    calls = []

    def first(e):
        calls.append(("first", e.seconds_remaining))

    def second(e):
        calls.append(("second", e.seconds_remaining))

    bus.subscribe(TimeWarning, first)
    bus.subscribe(TimeWarning, second)
    bus.emit(TimeWarning(30.0))
    bus.unsubscribe(TimeWarning, first)
    bus.unsubscribe(TimeWarning, first)
    bus.emit(TimeWarning(10.0))

    assert calls == [("first", 30.0), ("second", 30.0), ("second", 10.0)]


def test_events_are_routed_by_type():
    bus = EventBus()
    blocked = []
    bus.subscribe(ContentBlocked, blocked.append)
    bus.emit(OwnershipChanged("x", None, None))
    bus.emit(ContentBlocked("x", "msg"))
    assert blocked == [ContentBlocked("x", "msg")]


def test_subscribe_requires_callable():
    with pytest.raises(TypeError):
        EventBus().subscribe(TimeWarning, "nope")


def test_events_are_immutable():
    ev = TimeWarning(5.0)
    with pytest.raises(Exception):
        ev.seconds_remaining = 1.0


def test_error_hierarchy():
    for err in (NotOwnedError("x"), BackendUnavailableError("y"), BackendFailedError("z")):
        assert isinstance(err, EntitlementError)
        assert isinstance(err, DlcGateError)
    assert BackendUnavailableError.transient is True
    assert NotOwnedError.transient is False
    assert "x" in str(NotOwnedError("x"))


@pytest.mark.parametrize(
    "error,kind",
    [
        (NotOwnedError("x"), "purchase"),
        (ContentGatedError("x"), "purchase"),
        (BackendUnavailableError("offline"), "retry"),
        (BackendFailedError("boom"), "error"),
        (LaunchFailedError("no browser"), "error"),
        (ContentLoadError("x", "too new"), "error"),
    ],
)
def test_describe_error(error, kind):
    assert describe_error(error) == kind
