"""Presentation-facing view over a chat session."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Optional

from chatclient.errors import Outcome
from chatclient.events import EventKind, Handler
from chatclient.network.session import ChatSession
from chatclient.rooms import task_room_id
from shared.models.chat import ChatMessage, ErrorPayload, MessageType

LOGGER = logging.getLogger(__name__)


class ChatConsumer:
    """Derives UI state from session events and forwards commands.

    ``is_connected``, ``error`` and ``unread_count`` follow the dispatcher;
    ``is_connecting`` is true only while this consumer's own :meth:`connect`
    is awaiting. Call :meth:`close` (or use the consumer as a context
    manager) to drop every subscription.
    """

    def __init__(
        self,
        session: ChatSession,
        *,
        user_id: Optional[str] = None,
        focused_room: Optional[str] = None,
    ) -> None:
        self._session = session
        self.user_id = user_id if user_id is not None else session.settings.user_id
        self.focused_room = focused_room
        self._is_connected = session.is_connected
        self._is_connecting = False
        self._error: Optional[str] = None
        self._unread_count = 0
        self._subscriptions: list[tuple[EventKind, Handler]] = [
            (EventKind.CONNECTED, self._handle_connected),
            (EventKind.DISCONNECTED, self._handle_disconnected),
            (EventKind.ERROR, self._handle_error),
            (EventKind.MESSAGE, self._handle_message),
        ]
        self._attached = False
        self.attach()

    def __enter__(self) -> ChatConsumer:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def is_connected(self) -> bool:
        return self._is_connected

    @property
    def is_connecting(self) -> bool:
        return self._is_connecting

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def unread_count(self) -> int:
        return self._unread_count

    def attach(self) -> None:
        if self._attached:
            return
        for kind, handler in self._subscriptions:
            self._session.events.on(kind, handler)
        self._attached = True

    def close(self) -> None:
        for kind, handler in self._subscriptions:
            self._session.events.off(kind, handler)
        self._attached = False

    def focus(self, room_id: Optional[str]) -> None:
        self.focused_room = room_id

    def reset_unread(self) -> None:
        self._unread_count = 0

    def get_connection_status(self) -> bool:
        return self._session.get_connection_status()

    async def connect(self) -> Outcome:
        if self._session.is_connected:
            self._is_connected = True
            return Outcome.success()
        self._is_connecting = True
        self._error = None
        try:
            outcome = await self._session.connect()
        finally:
            self._is_connecting = False
        if outcome:
            self._is_connected = True
        else:
            LOGGER.error("Failed to connect to chat: %s", outcome.error)
            self._error = str(outcome.error)
        return outcome

    async def disconnect(self) -> None:
        await self._session.disconnect()
        self._is_connected = False
        self._error = None

    async def join_room(self, room_id: str) -> Outcome:
        return await self._session.join_room(room_id)

    async def send_message(
        self,
        room_id: str,
        body: str,
        message_type: MessageType | str = MessageType.TEXT,
    ) -> Outcome:
        return await self._session.send_message(room_id, body, message_type)

    async def send_typing(self, room_id: str) -> Outcome:
        return await self._session.send_typing(room_id)

    async def send_stop_typing(self, room_id: str) -> Outcome:
        return await self._session.send_stop_typing(room_id)

    async def mark_messages_read(self, room_id: str, message_ids: Iterable[str]) -> Outcome:
        return await self._session.mark_messages_read(room_id, message_ids)

    def _handle_connected(self, _payload: Any) -> None:
        self._is_connected = True
        self._error = None

    def _handle_disconnected(self, _payload: Any) -> None:
        self._is_connected = False

    def _handle_error(self, payload: Optional[ErrorPayload]) -> None:
        self._error = payload.message if payload and payload.message else "Chat service error"

    def _handle_message(self, message: ChatMessage) -> None:
        if self._is_focused(message):
            return
        if self.user_id is not None and str(message.sender_id) == str(self.user_id):
            return
        self._unread_count += 1

    def _is_focused(self, message: ChatMessage) -> bool:
        if self.focused_room is None:
            return False
        if message.room_id == self.focused_room:
            return True
        return message.task_id is not None and task_room_id(message.task_id) == self.focused_room
