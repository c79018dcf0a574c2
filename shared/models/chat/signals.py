from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class TypingSignal(BaseModel):
    """Ephemeral "user is typing" indicator; the backend only names the user."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: Union[int, str] = Field(alias="userId")
    is_typing: bool = Field(default=True, alias="isTyping")
    room_id: Optional[str] = Field(default=None, alias="roomId")
    task_id: Optional[Union[int, str]] = Field(default=None, alias="taskId")


class ReadReceipt(BaseModel):
    """Read acknowledgement for a room (``messages-read``)."""

    model_config = ConfigDict(populate_by_name=True)

    room_id: str = Field(alias="roomId")
    message_ids: List[str] = Field(default_factory=list, alias="messageIds")
    unread_count: Optional[int] = Field(default=None, alias="unreadCount")
