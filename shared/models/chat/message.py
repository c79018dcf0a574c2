from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class MessageType(str, Enum):
    TEXT = "TEXT"
    FILE = "FILE"
    IMAGE = "IMAGE"
    SYSTEM = "SYSTEM"


class SenderRole(str, Enum):
    owner = "owner"
    bidder = "bidder"


class ChatMessage(BaseModel):
    """Message delivered to a task room (``new-message``)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    room_id: str = Field(alias="roomId")
    task_id: Optional[Union[int, str]] = Field(default=None, alias="taskId")
    sender_id: Union[int, str] = Field(alias="senderId")
    sender_email: Optional[str] = Field(default=None, alias="senderEmail")
    sender_name: Optional[str] = Field(default=None, alias="senderName")
    sender_role: Optional[SenderRole] = Field(default=None, alias="senderRole")
    body: str = Field(alias="message")
    type: MessageType = Field(default=MessageType.TEXT, alias="messageType")
    file_url: Optional[str] = Field(default=None, alias="fileUrl")
    is_read: bool = Field(default=False, alias="isRead")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
