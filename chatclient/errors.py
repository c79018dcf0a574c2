"""Error taxonomy for the chat session client.

Failures never escape the session as raised exceptions; they are carried by
dispatcher ``error`` events or returned inside an :class:`Outcome`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class ChatSessionError(RuntimeError):
    """Base class for chat session failures."""

    kind = "ChatSessionError"


class AuthenticationMissing(ChatSessionError):
    """No credential was available for a connect attempt."""

    kind = "AuthenticationMissing"


class HandshakeFailed(ChatSessionError):
    """The transport rejected or failed the connection handshake."""

    kind = "HandshakeFailed"


class InvoluntaryDisconnect(ChatSessionError):
    """The transport reported a connection loss not requested by the client."""

    kind = "InvoluntaryDisconnect"


class CommandDroppedWhileDisconnected(ChatSessionError):
    """An outbound command was discarded because the session is not connected."""

    kind = "CommandDroppedWhileDisconnected"


class InvalidCommand(ChatSessionError):
    """An outbound command failed local validation."""

    kind = "InvalidCommand"


class TransportError(ChatSessionError):
    """The transport failed to deliver an outbound command."""

    kind = "TransportError"


class HandlerFailed(ChatSessionError):
    """A dispatcher handler raised while processing an event."""

    kind = "HandlerFailed"


@dataclass(frozen=True)
class Outcome:
    """Result of ``connect`` and of every outbound command."""

    ok: bool
    error: Optional[ChatSessionError] = None

    def __bool__(self) -> bool:
        return self.ok

    @property
    def kind(self) -> Optional[str]:
        return self.error.kind if self.error else None

    @classmethod
    def success(cls) -> Outcome:
        return cls(ok=True)

    @classmethod
    def failure(cls, error: ChatSessionError) -> Outcome:
        return cls(ok=False, error=error)
