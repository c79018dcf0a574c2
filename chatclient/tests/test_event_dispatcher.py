import logging

import pytest

from chatclient.events import EventDispatcher, EventKind
from shared.models.chat import DisconnectedPayload, ErrorPayload


@pytest.mark.asyncio
async def test_delivery_follows_registration_order():
    dispatcher = EventDispatcher()
    calls = []

    async def second(payload):
        calls.append(("second", payload.reason))

    dispatcher.on(EventKind.DISCONNECTED, lambda payload: calls.append(("first", payload.reason)))
    dispatcher.on(EventKind.DISCONNECTED, second)

    await dispatcher.emit(EventKind.DISCONNECTED, DisconnectedPayload(reason="client"))

    assert calls == [("first", "client"), ("second", "client")]


@pytest.mark.asyncio
async def test_registration_is_idempotent_and_off_tolerates_unknown():
    dispatcher = EventDispatcher()
    calls = []

    def handler(payload):
        calls.append(payload)

    dispatcher.on(EventKind.CONNECTED, handler)
    dispatcher.on(EventKind.CONNECTED, handler)
    assert dispatcher.listener_count(EventKind.CONNECTED) == 1

    dispatcher.off(EventKind.MESSAGE, handler)
    dispatcher.off(EventKind.CONNECTED, lambda payload: None)

    await dispatcher.emit(EventKind.CONNECTED)
    assert calls == [None]

    dispatcher.off(EventKind.CONNECTED, handler)
    await dispatcher.emit(EventKind.CONNECTED)
    assert calls == [None]


@pytest.mark.asyncio
async def test_unregistering_during_dispatch_does_not_affect_current_event():
    dispatcher = EventDispatcher()
    calls = []

    def late(payload):
        calls.append("late")

    def early(payload):
        calls.append("early")
        dispatcher.off(EventKind.CONNECTED, late)

    dispatcher.on(EventKind.CONNECTED, early)
    dispatcher.on(EventKind.CONNECTED, late)

    await dispatcher.emit(EventKind.CONNECTED)
    await dispatcher.emit(EventKind.CONNECTED)

    assert calls == ["early", "late", "early"]


@pytest.mark.asyncio
async def test_failing_handler_is_isolated_and_reported(caplog):
    dispatcher = EventDispatcher()
    calls = []
    errors = []

    def broken(payload):
        raise ValueError("boom")

    dispatcher.on(EventKind.MESSAGE, broken)
    dispatcher.on(EventKind.MESSAGE, lambda payload: calls.append("after"))
    dispatcher.on(EventKind.ERROR, errors.append)

    caplog.set_level(logging.ERROR)
    await dispatcher.emit(EventKind.MESSAGE)

    assert calls == ["after"]
    assert len(errors) == 1
    assert errors[0].kind == "HandlerFailed"
    assert "boom" in errors[0].message


@pytest.mark.asyncio
async def test_failing_error_handler_does_not_loop():
    dispatcher = EventDispatcher()
    calls = []

    def broken_error_handler(payload):
        calls.append(payload.message)
        raise RuntimeError("still broken")

    def broken(payload):
        raise ValueError("boom")

    dispatcher.on(EventKind.ERROR, broken_error_handler)
    dispatcher.on(EventKind.TYPING, broken)

    await dispatcher.emit(EventKind.TYPING)
    await dispatcher.emit(EventKind.ERROR, ErrorPayload(message="direct"))

    assert len(calls) == 2
    assert calls[1] == "direct"


@pytest.mark.asyncio
async def test_kinds_are_independent_and_accept_wire_names():
    dispatcher = EventDispatcher()
    calls = []

    dispatcher.on("stopTyping", lambda payload: calls.append("stop"))
    dispatcher.on(EventKind.TYPING, lambda payload: calls.append("typing"))

    await dispatcher.emit(EventKind.STOP_TYPING)

    assert calls == ["stop"]
    with pytest.raises(ValueError):
        dispatcher.on("not-a-kind", lambda payload: None)
