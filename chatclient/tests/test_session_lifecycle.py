import asyncio

import pytest

from chatclient.config import ChatClientSettings
from chatclient.credentials import StaticCredentialStore
from chatclient.events import EventKind
from chatclient.network.session import ChatSession
from chatclient.network.session_state import SessionStatus, SessionTracker
from chatclient.network.transport.dummy import DummyTransport


class _GatedTransport(DummyTransport):
    """Handshake blocks until the test opens the gate."""

    def __init__(self) -> None:
        super().__init__(None)
        self.gate = asyncio.Event()

    async def connect(self, credential: str) -> None:
        self.connect_calls += 1
        await self.gate.wait()
        self._connected = True


class _RejectingTransport(DummyTransport):
    async def connect(self, credential: str) -> None:
        self.connect_calls += 1
        raise RuntimeError("invalid token")


def _make_session(transport=None, token="token-abc", **overrides) -> ChatSession:
    settings = ChatClientSettings(**overrides)
    return ChatSession(
        settings=settings,
        transport=transport or DummyTransport(settings),
        credentials=StaticCredentialStore(token),
    )


def _record(session: ChatSession, kind: EventKind) -> list:
    seen = []
    session.events.on(kind, seen.append)
    return seen


@pytest.mark.asyncio
async def test_concurrent_connect_performs_single_handshake():
    transport = _GatedTransport()
    session = _make_session(transport)
    connected = _record(session, EventKind.CONNECTED)

    calls = [asyncio.create_task(session.connect()) for _ in range(3)]
    await asyncio.sleep(0)
    assert session.status is SessionStatus.CONNECTING

    transport.gate.set()
    outcomes = await asyncio.gather(*calls)

    assert all(outcomes)
    assert transport.connect_calls == 1
    assert session.is_connected
    assert len(connected) == 1
    assert connected[0].reconnect is False


@pytest.mark.asyncio
async def test_connect_when_connected_is_idempotent():
    transport = DummyTransport()
    session = _make_session(transport)

    assert await session.connect()
    assert await session.connect()

    assert transport.connect_calls == 1


@pytest.mark.asyncio
async def test_connect_without_credential_fails_fast():
    transport = DummyTransport()
    session = _make_session(transport, token=None)
    errors = _record(session, EventKind.ERROR)

    outcome = await session.connect()

    assert not outcome
    assert outcome.kind == "AuthenticationMissing"
    assert session.status is SessionStatus.DISCONNECTED
    assert not session.is_connected
    assert transport.connect_calls == 0
    assert errors == []


@pytest.mark.asyncio
async def test_explicit_credential_overrides_store():
    transport = DummyTransport()
    session = _make_session(transport, token=None)

    assert await session.connect("explicit-token")
    assert transport.connect_calls == 1


@pytest.mark.asyncio
async def test_handshake_failure_reports_error_without_retry():
    transport = _RejectingTransport()
    session = _make_session(transport)
    errors = _record(session, EventKind.ERROR)

    outcome = await session.connect()
    await asyncio.sleep(0.01)

    assert not outcome
    assert outcome.kind == "HandshakeFailed"
    assert "invalid token" in str(outcome.error)
    assert session.status is SessionStatus.DISCONNECTED
    assert transport.connect_calls == 1
    assert [e.kind for e in errors] == ["HandshakeFailed"]
    assert session.last_error is not None and session.last_error.kind == "HandshakeFailed"


@pytest.mark.asyncio
async def test_connect_timeout_is_a_handshake_failure():
    transport = _GatedTransport()
    session = _make_session(transport, connect_timeout_seconds=0.01)

    outcome = await session.connect()

    assert not outcome
    assert outcome.kind == "HandshakeFailed"
    assert str(outcome.error) == "Connection timeout"
    assert session.status is SessionStatus.DISCONNECTED


@pytest.mark.asyncio
async def test_disconnect_clears_rooms_and_reports_client_reason():
    transport = DummyTransport()
    session = _make_session(transport)
    disconnects = _record(session, EventKind.DISCONNECTED)

    await session.connect()
    await session.join_room("task-1")
    await session.disconnect()

    assert session.status is SessionStatus.DISCONNECTED
    assert len(session.rooms) == 0
    assert not transport.is_connected()
    assert [d.reason for d in disconnects] == ["client"]

    await session.disconnect()
    assert len(disconnects) == 1


@pytest.mark.asyncio
async def test_disconnect_during_inflight_connect_discards_late_success():
    transport = _GatedTransport()
    session = _make_session(transport)
    connected = _record(session, EventKind.CONNECTED)

    pending = asyncio.create_task(session.connect())
    await asyncio.sleep(0)
    await session.disconnect()
    assert session.status is SessionStatus.DISCONNECTED

    transport.gate.set()
    outcome = await pending

    assert not outcome
    assert session.status is SessionStatus.DISCONNECTED
    assert not transport.is_connected()
    assert connected == []


@pytest.mark.asyncio
async def test_disconnect_then_connect_never_exposes_intermediate_state():
    transport = DummyTransport()
    session = _make_session(transport)
    await session.connect()

    observed = []
    session.events.on(EventKind.DISCONNECTED, lambda _p: observed.append(session.is_connected))

    await session.disconnect()
    observed.append(session.is_connected)
    assert await session.connect()

    assert observed == [False, False]
    assert session.is_connected


@pytest.mark.asyncio
async def test_transport_events_ignored_outside_expected_states():
    transport = DummyTransport()
    session = _make_session(transport)
    connected = _record(session, EventKind.CONNECTED)

    await transport.feed(EventKind.CONNECTED)
    await transport.feed(EventKind.DISCONNECTED, {"reason": "server closed"})

    assert session.status is SessionStatus.DISCONNECTED
    assert connected == []


@pytest.mark.asyncio
async def test_close_drops_all_listeners():
    session = _make_session()
    _record(session, EventKind.MESSAGE)
    await session.connect()

    async with session:
        pass

    assert session.status is SessionStatus.DISCONNECTED
    assert session.events.listener_count(EventKind.MESSAGE) == 0


def test_tracker_rejects_invalid_transition():
    tracker = SessionTracker()
    with pytest.raises(ValueError):
        tracker.transition(SessionStatus.CONNECTED)
    tracker.transition(SessionStatus.CONNECTING)
    tracker.transition(SessionStatus.CONNECTED)
    tracker.transition(SessionStatus.RECONNECTING)
    tracker.transition(SessionStatus.CONNECTING)
    assert tracker.status is SessionStatus.CONNECTING
