from .commands import (
    ChatCommand,
    JoinRoomCommand,
    MarkReadCommand,
    SendMessageCommand,
    StopTypingCommand,
    TypingCommand,
)
from .envelope import WsFrame
from .message import ChatMessage, MessageType, SenderRole
from .room import RoomJoined, RoomSummary
from .signals import ReadReceipt, TypingSignal
from .status import ConnectedPayload, DisconnectedPayload, ErrorPayload

__all__ = [
    "ChatCommand",
    "JoinRoomCommand",
    "MarkReadCommand",
    "SendMessageCommand",
    "StopTypingCommand",
    "TypingCommand",
    "WsFrame",
    "ChatMessage",
    "MessageType",
    "SenderRole",
    "RoomJoined",
    "RoomSummary",
    "ReadReceipt",
    "TypingSignal",
    "ConnectedPayload",
    "DisconnectedPayload",
    "ErrorPayload",
]
