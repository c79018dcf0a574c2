"""Helpers for building/parsing chat event frames."""

from __future__ import annotations

import json
from typing import Any, Dict

from pydantic import BaseModel

from shared.models.chat import ChatCommand, WsFrame

Payload = Dict[str, Any] | BaseModel


def _payload_dict(payload: Payload) -> Dict[str, Any]:
    if isinstance(payload, BaseModel):
        return payload.model_dump(exclude_none=True, by_alias=True)
    return payload


def build_frame(event: str, payload: Payload) -> Dict[str, Any]:
    """Construct a frame dict ready for transport."""

    frame = WsFrame(event=event, data=_payload_dict(payload))
    return frame.model_dump()


def command_frame(command: ChatCommand) -> Dict[str, Any]:
    """Frame an outbound command under its wire event name."""

    return build_frame(command.event, command)


def parse_frame(raw: str | bytes | Dict[str, Any]) -> WsFrame:
    """Validate an inbound frame; raises ``ValueError`` on malformed input."""

    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    if isinstance(raw, str):
        raw = json.loads(raw)
    return WsFrame.model_validate(raw)
