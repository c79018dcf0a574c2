from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, Field


class WsFrame(BaseModel):
    """Named event frame exchanged over the chat WebSocket."""

    event: str = Field(min_length=1)
    data: Dict[str, Any] = Field(default_factory=dict)
