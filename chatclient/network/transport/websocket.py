"""WebSocket transport implementation."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import random
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed

from chatclient.config import ChatClientSettings
from chatclient.errors import HandshakeFailed
from chatclient.events import EventKind
from chatclient.network.transport.base import (
    REASON_SERVER_CLOSED,
    REASON_SERVER_DISCONNECT,
    REASON_TRANSPORT_ERROR,
    ChatTransport,
)
from shared.models.chat import ChatCommand, WsFrame
from shared.protocol import command_frame, parse_frame

LOGGER = logging.getLogger(__name__)

INBOUND_EVENTS: dict[str, EventKind] = {
    "new-message": EventKind.MESSAGE,
    "user-typing": EventKind.TYPING,
    "messages-read": EventKind.READ_RECEIPT,
    "room-joined": EventKind.ROOM_JOINED,
    "error": EventKind.ERROR,
}


class WebSocketTransport(ChatTransport):
    """WebSocket-based chat transport with its own reconnect policy."""

    def __init__(self, settings: ChatClientSettings) -> None:
        self._settings = settings
        self._ws: Optional[ClientConnection] = None
        self._credential: Optional[str] = None
        self._recv_task: Optional[asyncio.Task[None]] = None
        self._reconnect_task: Optional[asyncio.Task[None]] = None
        self._closing = False
        # bumped by connect/disconnect; handshakes from an older generation are closed
        self._generation = 0

    async def connect(self, credential: str) -> None:
        self._generation += 1
        generation = self._generation
        await self._stop_background()
        await self._close_socket()
        self._closing = False
        self._credential = credential
        await self._open(generation)
        self._start_receiving()

    async def disconnect(self) -> None:
        self._generation += 1
        self._closing = True
        await self._stop_background()
        await self._close_socket()

    async def send(self, command: ChatCommand) -> None:
        if not self._ws:
            raise RuntimeError("WebSocket transport not connected")
        payload = json.dumps(jsonable_encoder(command_frame(command)))
        LOGGER.debug("WebSocket send: %s", payload)
        await self._ws.send(payload)

    def is_connected(self) -> bool:
        return self._ws is not None

    async def _open(self, generation: int) -> None:
        url = str(self._settings.chat_ws_url)
        LOGGER.info("Connecting to chat WebSocket at %s", url)
        try:
            ws = await connect(
                url,
                additional_headers={"Authorization": f"Bearer {self._credential}"},
            )
        except OSError as exc:
            raise HandshakeFailed(f"Unable to reach chat service: {exc}") from exc
        if generation != self._generation:
            LOGGER.info("Closing superseded chat WebSocket handshake")
            await ws.close()
            raise HandshakeFailed("Connection attempt superseded")
        self._ws = ws

    async def _close_socket(self) -> None:
        ws = self._ws
        self._ws = None
        if ws is not None:
            LOGGER.info("Closing chat WebSocket transport")
            await ws.close()

    def _start_receiving(self) -> None:
        self._recv_task = asyncio.create_task(self._receive_loop(), name="chat-transport-recv")

    async def _stop_background(self) -> None:
        current = asyncio.current_task()
        for task in (self._reconnect_task, self._recv_task):
            # the calling loop exits on its own once _closing is set
            if task is None or task.done() or task is current:
                continue
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._reconnect_task = None
        self._recv_task = None

    async def _receive_loop(self) -> None:
        ws = self._ws
        if ws is None:
            return
        try:
            async for raw in ws:
                LOGGER.debug("WebSocket receive: %s", raw)
                try:
                    frame = parse_frame(raw)
                except ValueError as exc:
                    LOGGER.warning("Dropping malformed frame from chat service: %s", exc)
                    continue
                await self._dispatch_frame(frame)
        except asyncio.CancelledError:
            raise
        except ConnectionClosed:
            pass
        except Exception as exc:  # noqa: BLE001
            LOGGER.warning("Receive loop error: %s", exc)
            with contextlib.suppress(Exception):
                await ws.close()
        if self._closing or self._ws is not ws:
            return
        self._ws = None
        reason = self._close_reason(ws.close_code)
        LOGGER.warning("Chat WebSocket dropped (code=%s): %s", ws.close_code, reason)
        await self._notify(EventKind.DISCONNECTED, {"reason": reason})
        if not self._closing:
            self._reconnect_task = asyncio.create_task(
                self._reconnect_with_backoff(), name="chat-transport-reconnect"
            )

    async def _dispatch_frame(self, frame: WsFrame) -> None:
        kind = INBOUND_EVENTS.get(frame.event)
        if kind is None:
            LOGGER.debug("Ignoring unhandled chat event %s", frame.event)
            return
        if kind is EventKind.TYPING and frame.data.get("isTyping") is False:
            kind = EventKind.STOP_TYPING
        await self._notify(kind, frame.data)

    def _close_reason(self, code: Optional[int]) -> str:
        if code in self._settings.forced_close_codes:
            return REASON_SERVER_DISCONNECT
        if code in {1000, 1001}:
            return REASON_SERVER_CLOSED
        return REASON_TRANSPORT_ERROR

    async def _reconnect_with_backoff(self) -> None:
        base_delay = float(self._settings.reconnect_base_delay_seconds)
        max_delay = float(self._settings.reconnect_max_delay_seconds)
        jitter = float(self._settings.reconnect_jitter)
        max_attempts = int(self._settings.reconnect_max_attempts)
        generation = self._generation
        attempt = 0
        last_error: Optional[Exception] = None
        while not self._closing and attempt < max_attempts:
            attempt += 1
            delay = min(max_delay, base_delay * (2 ** (attempt - 1)))
            sleep_for = max(0.1, delay * random.uniform(1 - jitter, 1 + jitter))
            await asyncio.sleep(sleep_for)
            if self._closing:
                return
            try:
                await self._open(generation)
            except asyncio.CancelledError:
                raise
            except Exception as exc:  # noqa: BLE001
                last_error = exc
                LOGGER.warning("Chat reconnect failed (attempt %s/%s): %s", attempt, max_attempts, exc)
                continue
            LOGGER.info("Chat transport reconnected after %s attempt(s)", attempt)
            self._start_receiving()
            await self._notify(EventKind.CONNECTED, {"reconnect": True})
            return
        if self._closing:
            return
        LOGGER.warning("Chat service unavailable after %s reconnection attempts: %s", attempt, last_error)
        payload: dict[str, Any] = {
            "message": "Chat service unavailable after max reconnection attempts",
            "kind": HandshakeFailed.kind,
        }
        await self._notify(EventKind.ERROR, payload)
