"""Transport implementations for the chat session."""

from .base import ChatTransport
from .dummy import DummyTransport
from .websocket import WebSocketTransport

__all__ = ["ChatTransport", "DummyTransport", "WebSocketTransport"]
