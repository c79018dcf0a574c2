import pytest

from chatclient.config import ChatClientSettings
from chatclient.credentials import (
    FileCredentialStore,
    StaticCredentialStore,
    credential_store_from_settings,
)


def test_file_store_reads_persisted_token(tmp_path):
    store = FileCredentialStore(tmp_path / "auth" / "token")
    assert store.get_token() is None

    store.save_token("  token-xyz\n")
    assert store.get_token() == "token-xyz"

    store.clear()
    store.clear()
    assert store.get_token() is None


def test_file_store_treats_blank_file_as_missing(tmp_path):
    path = tmp_path / "token"
    path.write_text("   \n", encoding="utf-8")

    assert FileCredentialStore(path).get_token() is None


def test_static_store():
    store = StaticCredentialStore("")
    assert store.get_token() is None
    store.save_token("abc")
    assert store.get_token() == "abc"


def test_store_from_settings_prefers_explicit_token(tmp_path):
    token_file = tmp_path / "token"
    token_file.write_text("from-file", encoding="utf-8")

    with_token = credential_store_from_settings(ChatClientSettings(auth_token="from-settings", token_file=token_file))
    without_token = credential_store_from_settings(ChatClientSettings(token_file=token_file))

    assert with_token.get_token() == "from-settings"
    assert isinstance(without_token, FileCredentialStore)
    assert without_token.get_token() == "from-file"


def test_settings_load_yaml_config_file(tmp_path, monkeypatch):
    config = tmp_path / "chat-client.yaml"
    config.write_text(
        "reconnect_max_attempts: 9\nlog_level: debug\nforced_disconnect_reasons:\n  - kicked\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("CHAT_CLIENT_CONFIG_FILE", str(config))

    settings = ChatClientSettings()

    assert settings.reconnect_max_attempts == 9
    assert settings.log_level == "DEBUG"
    assert settings.forced_disconnect_reasons == ["kicked"]
    assert settings.config_path == config


def test_settings_env_overrides_defaults(monkeypatch):
    monkeypatch.setenv("CHAT_CLIENT_TRANSPORT", "dummy")
    monkeypatch.setenv("CHAT_CLIENT_RECONNECT_JITTER", "3")

    settings = ChatClientSettings()

    assert settings.transport == "dummy"
    assert settings.reconnect_jitter == 1.0


def test_settings_reject_non_mapping_config(tmp_path, monkeypatch):
    config = tmp_path / "chat-client.yaml"
    config.write_text("- not\n- a mapping\n", encoding="utf-8")
    monkeypatch.setenv("CHAT_CLIENT_CONFIG_FILE", str(config))

    with pytest.raises(ValueError):
        ChatClientSettings()
