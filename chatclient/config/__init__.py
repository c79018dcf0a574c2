"""Configuration primitives for the chat session client."""

from .settings import ChatClientSettings, get_settings

__all__ = ["ChatClientSettings", "get_settings"]
