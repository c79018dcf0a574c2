"""Outbound commands sent from the chat client to the chat service."""

from __future__ import annotations

from typing import ClassVar, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .message import MessageType


class ChatCommand(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event: ClassVar[str]

    room_id: str = Field(alias="roomId")
    task_id: Optional[Union[int, str]] = Field(default=None, alias="taskId")


class JoinRoomCommand(ChatCommand):
    event: ClassVar[str] = "join-task-room"


class SendMessageCommand(ChatCommand):
    event: ClassVar[str] = "send-message"

    body: str = Field(alias="message")
    message_type: MessageType = Field(default=MessageType.TEXT, alias="messageType")


class TypingCommand(ChatCommand):
    event: ClassVar[str] = "typing"


class StopTypingCommand(ChatCommand):
    event: ClassVar[str] = "stop-typing"


class MarkReadCommand(ChatCommand):
    event: ClassVar[str] = "mark-messages-read"

    message_ids: List[str] = Field(default_factory=list, alias="messageIds")
