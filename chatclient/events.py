"""Typed publish/subscribe bus between the session and its consumers."""

from __future__ import annotations

import asyncio
import enum
import inspect
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from chatclient.errors import HandlerFailed
from shared.models.chat import (
    ChatMessage,
    ConnectedPayload,
    DisconnectedPayload,
    ErrorPayload,
    ReadReceipt,
    RoomJoined,
    TypingSignal,
)

LOGGER = logging.getLogger(__name__)


class EventKind(str, enum.Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    MESSAGE = "message"
    TYPING = "typing"
    STOP_TYPING = "stopTyping"
    READ_RECEIPT = "readReceipt"
    ROOM_JOINED = "roomJoined"
    ERROR = "error"


EVENT_PAYLOADS: Dict[EventKind, type[BaseModel]] = {
    EventKind.CONNECTED: ConnectedPayload,
    EventKind.DISCONNECTED: DisconnectedPayload,
    EventKind.MESSAGE: ChatMessage,
    EventKind.TYPING: TypingSignal,
    EventKind.STOP_TYPING: TypingSignal,
    EventKind.READ_RECEIPT: ReadReceipt,
    EventKind.ROOM_JOINED: RoomJoined,
    EventKind.ERROR: ErrorPayload,
}

Handler = Callable[[Any], Awaitable[None] | None]


class EventDispatcher:
    """Delivers events to handlers in registration order, isolating failures.

    Handlers receive the payload model registered for their kind in
    :data:`EVENT_PAYLOADS` and may be plain callables or coroutine functions.
    A handler that raises is logged and reported as an ``error`` event; a
    failure inside an ``error`` handler is only logged.
    """

    def __init__(self) -> None:
        self._handlers: Dict[EventKind, List[Handler]] = defaultdict(list)

    def on(self, kind: EventKind, handler: Handler) -> None:
        kind = EventKind(kind)
        handlers = self._handlers[kind]
        if handler in handlers:
            return
        LOGGER.debug("Registering handler for %s: %s", kind.value, handler)
        handlers.append(handler)

    def off(self, kind: EventKind, handler: Handler) -> None:
        handlers = self._handlers.get(EventKind(kind), [])
        if handler in handlers:
            handlers.remove(handler)

    def listener_count(self, kind: EventKind) -> int:
        return len(self._handlers.get(EventKind(kind), []))

    def clear(self) -> None:
        self._handlers.clear()

    async def emit(self, kind: EventKind, payload: Optional[BaseModel] = None) -> None:
        kind = EventKind(kind)
        handlers = list(self._handlers.get(kind, []))
        if not handlers:
            LOGGER.debug("No handler registered for %s", kind.value)
            return
        for handler in handlers:
            try:
                result = handler(payload)
                if inspect.isawaitable(result):
                    await result
            except asyncio.CancelledError:
                raise
            except Exception as exc:  # noqa: BLE001
                LOGGER.exception("Handler error for %s", kind.value)
                if kind is EventKind.ERROR:
                    continue
                await self.emit(
                    EventKind.ERROR,
                    ErrorPayload(message=f"Handler for {kind.value} failed: {exc}", kind=HandlerFailed.kind),
                )
