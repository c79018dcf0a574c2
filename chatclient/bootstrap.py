"""Chat client bootstrap entrypoint for network/session wiring."""

from __future__ import annotations

import asyncio
import logging
from typing import Type

from chatclient.config import ChatClientSettings, get_settings
from chatclient.credentials import credential_store_from_settings
from chatclient.events import EventKind
from chatclient.network.session import ChatSession
from chatclient.network.transport.base import ChatTransport
from chatclient.network.transport.dummy import DummyTransport
from chatclient.network.transport.websocket import WebSocketTransport
from shared.models.chat import ChatMessage, DisconnectedPayload, ErrorPayload

LOGGER = logging.getLogger(__name__)
_session: ChatSession | None = None


def build_session(settings: ChatClientSettings) -> ChatSession:
    """Construct a session wired to the configured transport and token source."""

    resolved_cls: Type[ChatTransport]
    resolved_cls = WebSocketTransport if settings.transport == "websocket" else DummyTransport
    LOGGER.debug("Initialising chat session via %s", resolved_cls.__name__)
    return ChatSession(
        settings=settings,
        transport=resolved_cls(settings),
        credentials=credential_store_from_settings(settings),
    )


async def setup() -> ChatSession:
    """Construct, wire, and connect the chat session."""

    global _session
    settings = get_settings()
    session = build_session(settings)

    def _log_message(message: ChatMessage) -> None:
        LOGGER.info("[%s] %s: %s", message.room_id, message.sender_name or message.sender_id, message.body)

    def _log_disconnect(payload: DisconnectedPayload) -> None:
        LOGGER.info("Chat session disconnected: %s", payload.reason)

    def _log_error(payload: ErrorPayload) -> None:
        LOGGER.warning("Chat session error (%s): %s", payload.kind, payload.message)

    session.events.on(EventKind.MESSAGE, _log_message)
    session.events.on(EventKind.DISCONNECTED, _log_disconnect)
    session.events.on(EventKind.ERROR, _log_error)

    outcome = await session.connect()
    if not outcome:
        await session.close()
        raise RuntimeError(f"Chat connect failed ({outcome.kind}): {outcome.error}")
    _session = session
    return session


async def serve_forever() -> None:
    """Start the chat session and keep the process alive."""

    await setup()
    try:
        await asyncio.Future()  # block until cancelled
    except asyncio.CancelledError:
        LOGGER.info("Chat client shutdown requested")
        raise
    finally:
        if _session:
            await _session.close()


def main() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    try:
        asyncio.run(serve_forever())
    except KeyboardInterrupt:
        pass
