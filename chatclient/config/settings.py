"""Chat client configuration loading and validation."""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, ClassVar, Dict, Iterable, Literal

import yaml
from pydantic import AnyUrl, Field, PositiveInt
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_LOCATIONS: tuple[Path, ...] = (
    Path("/etc/campusworks/chat-client.yaml"),
    Path("/etc/campusworks/chat-client.yml"),
    Path("./config/chat-client.yaml"),
    Path("./config/chat-client.yml"),
)


def _default_token_file() -> Path:
    env_home = os.getenv("CAMPUSWORKS_HOME")
    if env_home:
        return Path(env_home) / "auth_token"
    return Path.home() / ".campusworks" / "auth_token"


class ChatClientSettings(BaseSettings):
    """Validated settings for the chat session client."""

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_prefix="CHAT_CLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Connection + identity
    chat_ws_url: AnyUrl = Field(
        default="ws://localhost:3001/ws/chat",
        description="Chat service WebSocket endpoint.",
    )
    auth_token: str | None = Field(
        default=None,
        description="Opaque bearer token; overrides the persisted token file when set.",
        repr=False,
    )
    token_file: Path = Field(
        default_factory=_default_token_file,
        description="Process-local file holding the persisted auth token.",
    )
    user_id: str | None = Field(
        default=None,
        description="Identifier of the signed-in user; own messages are not counted as unread.",
    )
    transport: Literal["dummy", "websocket"] = Field(
        default="websocket",
        description="Transport implementation to use.",
    )
    connect_timeout_seconds: float | None = Field(
        default=None,
        description="Optional upper bound on a single connect handshake.",
    )

    # Reconnection (owned by the transport)
    reconnect_base_delay_seconds: float = Field(
        default=1.0,
        description="Base delay for transport reconnection backoff.",
    )
    reconnect_max_delay_seconds: float = Field(
        default=30.0,
        description="Maximum delay for transport reconnection backoff.",
    )
    reconnect_jitter: float = Field(
        default=0.2,
        description="Jitter factor applied to reconnection backoff (0.0-1.0).",
    )
    reconnect_max_attempts: PositiveInt = Field(
        default=5,
        description="Reconnection attempts after an involuntary drop before giving up.",
    )
    forced_close_codes: list[int] = Field(
        default_factory=lambda: [1008, 4001, 4003],
        description="WebSocket close codes that mean the server forced the disconnect.",
    )
    forced_disconnect_reasons: list[str] = Field(
        default_factory=lambda: ["server disconnect"],
        description="Disconnect reasons surfaced to consumers as connection errors.",
    )

    # Commands
    message_max_length: PositiveInt = Field(
        default=2000,
        description="Maximum accepted message body length after trimming.",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Minimum log level for the chat client process.",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        if isinstance(value, str):
            return value.upper()
        return value

    @field_validator("reconnect_jitter")
    @classmethod
    def _clamp_jitter(cls, value: float) -> float:
        return min(max(value, 0.0), 1.0)

    config_path: Path | None = Field(
        default=None,
        description="Resolved path to the on-disk config that seeded the settings.",
        exclude=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[ChatClientSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            cls._yaml_settings_source,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )

    @staticmethod
    def _yaml_settings_source(settings_cls: type[ChatClientSettings] | None = None) -> Dict[str, Any]:
        candidates: Iterable[Path] = ChatClientSettings._resolve_candidate_paths()

        for path in candidates:
            data = ChatClientSettings._load_file(path)
            if data is not None:
                data.setdefault("config_path", path)
                return data
        return {}

    @staticmethod
    def _resolve_candidate_paths() -> Iterable[Path]:
        explicit = os.getenv("CHAT_CLIENT_CONFIG_FILE")
        if explicit:
            yield Path(explicit).expanduser()
        yield from DEFAULT_CONFIG_LOCATIONS

    @staticmethod
    def _load_file(path: Path) -> Dict[str, Any] | None:
        if not path.is_file():
            return None
        suffix = path.suffix.lower()
        try:
            with path.open("r", encoding="utf-8") as handle:
                if suffix in {".yaml", ".yml"}:
                    raw = yaml.safe_load(handle)
                elif suffix == ".json":
                    raw = json.load(handle)
                else:
                    return None
        except OSError as exc:
            raise RuntimeError(f"Failed to read chat client config file {path}") from exc
        except (yaml.YAMLError, json.JSONDecodeError) as exc:
            raise ValueError(f"Invalid chat client config file {path}") from exc

        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ValueError(f"Chat client config file {path} must contain a mapping at top level.")
        return raw


@lru_cache()
def get_settings() -> ChatClientSettings:
    """Return memoized chat client settings."""

    settings = ChatClientSettings()
    settings.token_file = settings.token_file.expanduser().resolve()
    return settings
