from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .message import ChatMessage


class RoomSummary(BaseModel):
    """Room metadata returned by the backend when a join succeeds."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    task_id: Union[int, str] = Field(alias="taskId")
    task_title: Optional[str] = Field(default=None, alias="taskTitle")
    status: Optional[str] = None
    last_message_at: Optional[datetime] = Field(default=None, alias="lastMessageAt")
    unread_count: Optional[Union[int, Dict[str, int]]] = Field(default=None, alias="unreadCount")
    owner_id: Optional[Union[int, str]] = Field(default=None, alias="ownerId")
    bidder_id: Optional[Union[int, str]] = Field(default=None, alias="bidderId")
    owner_email: Optional[str] = Field(default=None, alias="ownerEmail")
    bidder_email: Optional[str] = Field(default=None, alias="bidderEmail")
    other_user: Optional[Dict[str, Any]] = Field(default=None, alias="otherUser")


class RoomJoined(BaseModel):
    """Acknowledgement of ``join-task-room`` carrying recent history."""

    room: RoomSummary
    messages: List[ChatMessage] = Field(default_factory=list)
