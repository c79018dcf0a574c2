from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class ConnectedPayload(BaseModel):
    reconnect: bool = False


class DisconnectedPayload(BaseModel):
    reason: str


class ErrorPayload(BaseModel):
    """Error surfaced to consumers; ``kind`` names the failure class when known."""

    message: str = Field(default="Chat service error")
    kind: Optional[str] = None
