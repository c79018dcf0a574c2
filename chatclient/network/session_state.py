"""Connection status tracking for the chat session."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from shared.models.chat import ErrorPayload


class SessionStatus(enum.Enum):
    DISCONNECTED = "DISCONNECTED"
    CONNECTING = "CONNECTING"
    CONNECTED = "CONNECTED"
    RECONNECTING = "RECONNECTING"


@dataclass
class SessionTracker:
    """In-memory session metadata."""

    status: SessionStatus = SessionStatus.DISCONNECTED
    last_error: Optional[ErrorPayload] = None
    last_transition_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    def transition(self, next_status: SessionStatus) -> None:
        """Move the session into a new status, validating allowed transitions."""

        if next_status is self.status:
            return
        if not self._is_valid_transition(self.status, next_status):
            raise ValueError(f"Invalid transition {self.status.value} → {next_status.value}")
        self.status = next_status
        self.last_transition_at = datetime.now(tz=timezone.utc)

    @staticmethod
    def _is_valid_transition(current: SessionStatus, nxt: SessionStatus) -> bool:
        allowed = {
            SessionStatus.DISCONNECTED: {SessionStatus.CONNECTING},
            SessionStatus.CONNECTING: {SessionStatus.CONNECTED, SessionStatus.DISCONNECTED},
            SessionStatus.CONNECTED: {SessionStatus.RECONNECTING, SessionStatus.DISCONNECTED},
            SessionStatus.RECONNECTING: {
                SessionStatus.CONNECTED,
                SessionStatus.CONNECTING,
                SessionStatus.DISCONNECTED,
            },
        }
        return nxt in allowed.get(current, set())
