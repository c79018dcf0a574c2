"""Transport abstractions for the chat session."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any, Optional

from chatclient.events import EventKind
from shared.models.chat import ChatCommand

LOGGER = logging.getLogger(__name__)

REASON_CLIENT = "client"
REASON_SERVER_CLOSED = "server closed"
REASON_SERVER_DISCONNECT = "server disconnect"
REASON_TRANSPORT_ERROR = "transport error"

TransportListener = Callable[[EventKind, dict[str, Any]], Awaitable[None]]


class ChatTransport(ABC):
    """Abstract room-based publish/subscribe transport used by the chat session.

    Implementations own the physical connection, authentication and any
    automatic reconnection. They report what happens on the wire through the
    listener installed with :meth:`bind`: ``connected`` after they restore a
    dropped connection, ``disconnected`` with ``{"reason": ...}`` on an
    involuntary drop, and the inbound chat events with their raw payloads.
    """

    _listener: Optional[TransportListener] = None

    def bind(self, listener: TransportListener) -> None:
        self._listener = listener

    async def _notify(self, kind: EventKind, data: Optional[dict[str, Any]] = None) -> None:
        if self._listener is None:
            LOGGER.debug("No listener bound; dropping transport event %s", kind.value)
            return
        await self._listener(kind, data or {})

    @abstractmethod
    async def connect(self, credential: str) -> None:
        """Open and authenticate the connection; raises on failure."""

    @abstractmethod
    async def disconnect(self) -> None:
        ...

    @abstractmethod
    async def send(self, command: ChatCommand) -> None:
        ...

    @abstractmethod
    def is_connected(self) -> bool:
        ...
