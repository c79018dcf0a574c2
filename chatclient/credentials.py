"""Sources for the opaque auth token presented when connecting."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol

from chatclient.config import ChatClientSettings

LOGGER = logging.getLogger(__name__)


class CredentialStore(Protocol):
    def get_token(self) -> Optional[str]:
        ...


class StaticCredentialStore:
    """Token held in memory (settings, tests)."""

    def __init__(self, token: Optional[str] = None) -> None:
        self._token = token

    def get_token(self) -> Optional[str]:
        return self._token or None

    def save_token(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileCredentialStore:
    """Token persisted in a process-local file, read on every connect."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def get_token(self) -> Optional[str]:
        try:
            if not self.path.is_file():
                return None
            token = self.path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            LOGGER.warning("Unable to read auth token from %s: %s", self.path, exc)
            return None
        return token or None

    def save_token(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(token, encoding="utf-8")

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass


def credential_store_from_settings(settings: ChatClientSettings) -> CredentialStore:
    if settings.auth_token:
        return StaticCredentialStore(settings.auth_token)
    return FileCredentialStore(settings.token_file)
