"""Client-side chat session manager for the CampusWorks task marketplace."""

from chatclient.consumer import ChatConsumer
from chatclient.errors import (
    AuthenticationMissing,
    ChatSessionError,
    CommandDroppedWhileDisconnected,
    HandlerFailed,
    HandshakeFailed,
    InvalidCommand,
    InvoluntaryDisconnect,
    Outcome,
    TransportError,
)
from chatclient.events import EventDispatcher, EventKind
from chatclient.network import ChatSession, SessionStatus
from chatclient.rooms import RoomRegistry, task_room_id

__all__ = [
    "ChatConsumer",
    "ChatSession",
    "SessionStatus",
    "EventDispatcher",
    "EventKind",
    "RoomRegistry",
    "task_room_id",
    "Outcome",
    "ChatSessionError",
    "AuthenticationMissing",
    "HandshakeFailed",
    "InvoluntaryDisconnect",
    "CommandDroppedWhileDisconnected",
    "InvalidCommand",
    "TransportError",
    "HandlerFailed",
]
