from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .constants import DEFAULT_TEMPLATE_ID


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "y", "on"}


def _get_str(name: str, default: str) -> str:
    return os.getenv(name, default).strip() or default


@dataclass(frozen=True)
class Settings:
    token: str
    sync_guild_id: int
    sqlite_path: str
    log_level: str
    ollama_url: str = "http://localhost:11434"
    ollama_model: str = "llama3"
    generation_timeout_seconds: int = 120
    default_template: str = DEFAULT_TEMPLATE_ID
    # Searched before the bundled templates.
    templates_dir: Optional[str] = None
    # Re-running a build reuses resources whose keys are already stored.
    build_reuse_existing: bool = True


def load_settings() -> Settings:
    token = os.getenv("DISCORD_TOKEN", "").strip()
    if not token:
        raise RuntimeError("DISCORD_TOKEN is required")
    return Settings(
        token=token,
        sync_guild_id=_get_int("SYNC_GUILD_ID", 0),
        sqlite_path=_get_str("SQLITE_PATH", "guildsmith.sqlite3"),
        log_level=_get_str("LOG_LEVEL", "INFO"),
        ollama_url=_get_str("OLLAMA_URL", "http://localhost:11434"),
        ollama_model=_get_str("OLLAMA_MODEL", "llama3"),
        generation_timeout_seconds=_get_int("GENERATION_TIMEOUT_SECONDS", 120),
        default_template=_get_str("DEFAULT_TEMPLATE", DEFAULT_TEMPLATE_ID),
        templates_dir=os.getenv("TEMPLATES_DIR", "").strip() or None,
        build_reuse_existing=_get_bool("BUILD_REUSE_EXISTING", True),
    )
