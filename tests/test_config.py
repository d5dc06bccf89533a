from __future__ import annotations

import pytest

from guildsmith.config import load_settings

ENV_VARS = [
    "DISCORD_TOKEN",
    "SYNC_GUILD_ID",
    "SQLITE_PATH",
    "LOG_LEVEL",
    "OLLAMA_URL",
    "OLLAMA_MODEL",
    "GENERATION_TIMEOUT_SECONDS",
    "DEFAULT_TEMPLATE",
    "TEMPLATES_DIR",
    "BUILD_REUSE_EXISTING",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_token_is_required():
    with pytest.raises(RuntimeError):
        load_settings()


def test_defaults(monkeypatch):
    monkeypatch.setenv("DISCORD_TOKEN", "abc")
    settings = load_settings()
    assert settings.sync_guild_id == 0
    assert settings.sqlite_path == "guildsmith.sqlite3"
    assert settings.ollama_url == "http://localhost:11434"
    assert settings.ollama_model == "llama3"
    assert settings.default_template == "roblox_standard_v1"
    assert settings.templates_dir is None
    assert settings.build_reuse_existing is True


def test_overrides_and_malformed_values(monkeypatch):
    monkeypatch.setenv("DISCORD_TOKEN", "abc")
    monkeypatch.setenv("SYNC_GUILD_ID", "not-a-number")
    monkeypatch.setenv("GENERATION_TIMEOUT_SECONDS", "30")
    monkeypatch.setenv("BUILD_REUSE_EXISTING", "off")
    monkeypatch.setenv("TEMPLATES_DIR", "/srv/templates")
    settings = load_settings()
    assert settings.sync_guild_id == 0
    assert settings.generation_timeout_seconds == 30
    assert settings.build_reuse_existing is False
    assert settings.templates_dir == "/srv/templates"
