"""Network stack (transport/session) for the chat service."""

from chatclient.network.session import ChatSession
from chatclient.network.session_state import SessionStatus, SessionTracker
from chatclient.network.transport.base import ChatTransport
from chatclient.network.transport.dummy import DummyTransport
from chatclient.network.transport.websocket import WebSocketTransport

__all__ = [
    "ChatSession",
    "SessionStatus",
    "SessionTracker",
    "ChatTransport",
    "DummyTransport",
    "WebSocketTransport",
]
