"""In-process transport for offline use and testing."""

from __future__ import annotations

import logging
from typing import Any, Optional

from chatclient.events import EventKind
from chatclient.network.transport.base import ChatTransport
from shared.models.chat import ChatCommand

LOGGER = logging.getLogger(__name__)


class DummyTransport(ChatTransport):
    """Accepts any credential, records outbound commands, never touches the network."""

    def __init__(self, settings=None) -> None:
        self._settings = settings
        self._connected = False
        self.connect_calls = 0
        self.sent: list[ChatCommand] = []

    async def connect(self, credential: str) -> None:
        LOGGER.debug("Dummy transport connect()")
        self.connect_calls += 1
        self._connected = True

    async def disconnect(self) -> None:
        LOGGER.debug("Dummy transport disconnect()")
        self._connected = False

    async def send(self, command: ChatCommand) -> None:
        if not self._connected:
            raise RuntimeError("Dummy transport not connected")
        LOGGER.debug("Dummy transport send(): %s %s", command.event, command)
        self.sent.append(command)

    def is_connected(self) -> bool:
        return self._connected

    async def feed(self, kind: EventKind, data: Optional[dict[str, Any]] = None) -> None:
        """Report an event to the session as a real transport would."""

        if kind is EventKind.DISCONNECTED:
            self._connected = False
        elif kind is EventKind.CONNECTED:
            self._connected = True
        await self._notify(kind, data)
