"""Chat session: connection state machine, room replay and outbound commands.

The session is the only writer of connection status and of the room
registry. It is responsible for:
- connect/disconnect with a single in-flight handshake
- reacting to transport-reported drops and recoveries
- replaying room joins after a recovery
- validating outbound commands and dropping them while not connected
- fanning transport events out through the :class:`EventDispatcher`

Transport failures never propagate to callers; they surface as ``error``
events or as failed :class:`Outcome` values.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import ValidationError

from chatclient.config import ChatClientSettings
from chatclient.credentials import CredentialStore
from chatclient.errors import (
    AuthenticationMissing,
    ChatSessionError,
    CommandDroppedWhileDisconnected,
    HandshakeFailed,
    InvalidCommand,
    InvoluntaryDisconnect,
    Outcome,
    TransportError,
)
from chatclient.events import EVENT_PAYLOADS, EventDispatcher, EventKind
from chatclient.network.session_state import SessionStatus, SessionTracker
from chatclient.network.transport.base import REASON_CLIENT, REASON_TRANSPORT_ERROR, ChatTransport
from chatclient.rooms import RoomRegistry, task_id_for_room
from shared.models.chat import (
    ChatCommand,
    ConnectedPayload,
    DisconnectedPayload,
    ErrorPayload,
    JoinRoomCommand,
    MarkReadCommand,
    MessageType,
    SendMessageCommand,
    StopTypingCommand,
    TypingCommand,
)

LOGGER = logging.getLogger(__name__)
RECONNECTING_HINT = "Connection lost. Attempting to reconnect..."


@dataclass
class ChatSession:
    """Client-side chat session bound to one transport."""

    settings: ChatClientSettings
    transport: ChatTransport
    credentials: Optional[CredentialStore] = None
    events: EventDispatcher = field(default_factory=EventDispatcher)
    rooms: RoomRegistry = field(default_factory=RoomRegistry)
    tracker: SessionTracker = field(default_factory=SessionTracker)

    _connect_task: Optional[asyncio.Task[Outcome]] = field(default=None, init=False, repr=False)
    _epoch: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        self.transport.bind(self._on_transport_event)

    async def __aenter__(self) -> ChatSession:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    @property
    def status(self) -> SessionStatus:
        return self.tracker.status

    @property
    def is_connected(self) -> bool:
        return self.tracker.status is SessionStatus.CONNECTED

    @property
    def last_error(self) -> Optional[ErrorPayload]:
        return self.tracker.last_error

    def get_connection_status(self) -> bool:
        """Synchronous snapshot of the transport's own view of the link."""

        return self.transport.is_connected()

    # Lifecycle

    async def connect(self, credential: Optional[str] = None) -> Outcome:
        """Connect once; concurrent callers share the in-flight attempt."""

        if self.status is SessionStatus.CONNECTED:
            return Outcome.success()
        task = self._connect_task
        if task is not None and not task.done():
            return await asyncio.shield(task)

        token = credential or self._load_credential()
        if not token:
            error = AuthenticationMissing("No authentication token found")
            LOGGER.warning("Chat connect aborted: %s", error)
            self.tracker.last_error = ErrorPayload(message=str(error), kind=error.kind)
            return Outcome.failure(error)

        self._try_transition(SessionStatus.CONNECTING)
        task = asyncio.create_task(self._connect_once(token, self._epoch), name="chat-session-connect")
        self._connect_task = task
        return await asyncio.shield(task)

    async def disconnect(self, reason: str = REASON_CLIENT) -> None:
        """Drop the connection and forget joined rooms; never fails."""

        previous = self.status
        self._epoch += 1
        self._connect_task = None
        self._try_transition(SessionStatus.DISCONNECTED)
        self.rooms.clear()
        try:
            await self.transport.disconnect()
        except Exception:  # noqa: BLE001
            LOGGER.debug("Suppress transport disconnect error", exc_info=True)
        if previous is not SessionStatus.DISCONNECTED:
            LOGGER.info("Disconnected from chat service (%s)", reason)
            await self.events.emit(EventKind.DISCONNECTED, DisconnectedPayload(reason=reason))

    async def close(self) -> None:
        """Tear the session down at application shutdown."""

        await self.disconnect()
        self.events.clear()

    def _load_credential(self) -> Optional[str]:
        if self.credentials is None:
            return self.settings.auth_token
        return self.credentials.get_token()

    async def _connect_once(self, token: str, epoch: int) -> Outcome:
        timeout = self.settings.connect_timeout_seconds
        try:
            if timeout:
                await asyncio.wait_for(self.transport.connect(token), timeout=timeout)
            else:
                await self.transport.connect(token)
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001
            if epoch != self._epoch:
                return Outcome.failure(HandshakeFailed("Connect cancelled by disconnect"))
            message = "Connection timeout" if isinstance(exc, asyncio.TimeoutError) else str(exc)
            error = HandshakeFailed(message or exc.__class__.__name__)
            LOGGER.warning("Chat connection error: %s", error)
            self._try_transition(SessionStatus.DISCONNECTED)
            self.rooms.clear()
            await self._report_error(error)
            return Outcome.failure(error)

        if epoch != self._epoch:
            LOGGER.info("Discarding chat connection completed after disconnect")
            if self.status is SessionStatus.DISCONNECTED and self._connect_task is None:
                try:
                    await self.transport.disconnect()
                except Exception:  # noqa: BLE001
                    LOGGER.debug("Suppress transport disconnect error", exc_info=True)
            return Outcome.failure(HandshakeFailed("Connect cancelled by disconnect"))

        self._try_transition(SessionStatus.CONNECTED)
        self.tracker.last_error = None
        LOGGER.info("Connected to chat service")
        await self._replay_rooms()
        await self.events.emit(EventKind.CONNECTED, ConnectedPayload(reconnect=False))
        return Outcome.success()

    def _try_transition(self, status: SessionStatus) -> None:
        try:
            self.tracker.transition(status)
        except ValueError:
            LOGGER.debug(
                "Ignoring invalid session transition %s -> %s",
                self.tracker.status.value,
                status.value,
            )

    async def _report_error(self, error: ChatSessionError) -> None:
        payload = ErrorPayload(message=str(error), kind=error.kind)
        self.tracker.last_error = payload
        await self.events.emit(EventKind.ERROR, payload)

    # Transport callbacks

    async def _on_transport_event(self, kind: EventKind, data: dict[str, Any]) -> None:
        if kind is EventKind.CONNECTED:
            await self._on_transport_connected()
            return
        if kind is EventKind.DISCONNECTED:
            await self._on_transport_disconnected(str(data.get("reason") or REASON_TRANSPORT_ERROR))
            return
        try:
            payload = EVENT_PAYLOADS[kind].model_validate(data)
        except ValidationError as exc:
            LOGGER.warning("Dropping invalid %s payload from chat service: %s", kind.value, exc)
            return
        if kind is EventKind.ERROR:
            LOGGER.error("Chat service error: %s", payload.message)
            self.tracker.last_error = payload
        await self.events.emit(kind, payload)

    async def _on_transport_connected(self) -> None:
        if self.status is not SessionStatus.RECONNECTING:
            LOGGER.debug("Ignoring transport connected while %s", self.status.value)
            return
        self._try_transition(SessionStatus.CONNECTED)
        self.tracker.last_error = None
        LOGGER.info("Chat service reconnected; replaying %s room(s)", len(self.rooms))
        await self._replay_rooms()
        await self.events.emit(EventKind.CONNECTED, ConnectedPayload(reconnect=True))

    async def _on_transport_disconnected(self, reason: str) -> None:
        if self.status is not SessionStatus.CONNECTED:
            LOGGER.debug("Ignoring transport disconnect (%s) while %s", reason, self.status.value)
            return
        self._try_transition(SessionStatus.RECONNECTING)
        LOGGER.warning("Chat service disconnected: %s", reason)
        await self.events.emit(EventKind.DISCONNECTED, DisconnectedPayload(reason=reason))
        if reason in self.settings.forced_disconnect_reasons:
            await self._report_error(InvoluntaryDisconnect(RECONNECTING_HINT))

    async def _replay_rooms(self) -> None:
        for room in self.rooms:
            if self.status is not SessionStatus.CONNECTED:
                LOGGER.debug("Room replay interrupted while %s", self.status.value)
                return
            outcome = await self._send(self._join_command(room.room_id))
            if not outcome:
                LOGGER.warning("Failed to rejoin room %s: %s", room.room_id, outcome.error)

    # Outbound commands

    async def join_room(self, room_id: str) -> Outcome:
        dropped = self._drop_unless_connected("join", room_id)
        if dropped is not None:
            return dropped
        if room_id in self.rooms:
            LOGGER.debug("Room %s already joined", room_id)
            return Outcome.success()
        command = self._join_command(room_id)
        self.rooms.add(room_id)
        outcome = await self._send(command)
        if not outcome:
            self.rooms.discard(room_id)
        return outcome

    def leave_room(self, room_id: str) -> bool:
        """Stop replaying a room after reconnects; nothing is sent."""

        return self.rooms.discard(room_id)

    async def send_message(
        self,
        room_id: str,
        body: str,
        message_type: MessageType | str = MessageType.TEXT,
    ) -> Outcome:
        dropped = self._drop_unless_connected("message", room_id)
        if dropped is not None:
            return dropped
        text = (body or "").strip()
        if not text:
            return self._reject("Message cannot be empty")
        if len(text) > self.settings.message_max_length:
            return self._reject("Message too long")
        try:
            kind = MessageType(message_type)
        except ValueError:
            return self._reject(f"Unsupported message type {message_type!r}")
        command = SendMessageCommand(
            room_id=room_id,
            task_id=task_id_for_room(room_id),
            body=text,
            message_type=kind,
        )
        return await self._send(command)

    async def send_typing(self, room_id: str) -> Outcome:
        dropped = self._drop_unless_connected("typing", room_id)
        if dropped is not None:
            return dropped
        return await self._send(TypingCommand(room_id=room_id, task_id=task_id_for_room(room_id)))

    async def send_stop_typing(self, room_id: str) -> Outcome:
        dropped = self._drop_unless_connected("stop-typing", room_id)
        if dropped is not None:
            return dropped
        return await self._send(StopTypingCommand(room_id=room_id, task_id=task_id_for_room(room_id)))

    async def mark_messages_read(self, room_id: str, message_ids: Iterable[str]) -> Outcome:
        dropped = self._drop_unless_connected("read-receipt", room_id)
        if dropped is not None:
            return dropped
        return await self._send(MarkReadCommand(room_id=room_id, message_ids=list(message_ids)))

    def _join_command(self, room_id: str) -> JoinRoomCommand:
        return JoinRoomCommand(room_id=room_id, task_id=task_id_for_room(room_id))

    def _drop_unless_connected(self, action: str, room_id: str) -> Optional[Outcome]:
        if self.status is SessionStatus.CONNECTED:
            return None
        LOGGER.warning("Not connected to chat service; dropping %s for room %s", action, room_id)
        return Outcome.failure(
            CommandDroppedWhileDisconnected(f"{action} dropped while {self.status.value}")
        )

    def _reject(self, reason: str) -> Outcome:
        LOGGER.warning("Rejecting chat command: %s", reason)
        return Outcome.failure(InvalidCommand(reason))

    async def _send(self, command: ChatCommand) -> Outcome:
        try:
            await self.transport.send(command)
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning("Failed to send %s: %s", command.event, exc)
            return Outcome.failure(TransportError(str(exc) or exc.__class__.__name__))
        return Outcome.success()
