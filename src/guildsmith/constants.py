from __future__ import annotations

from typing import Final

# Discord limits
MAX_CHANNEL_NAME_LENGTH: Final[int] = 90
MAX_SLOWMODE_SECONDS: Final[int] = 21600
MAX_EMBED_DESCRIPTION: Final[int] = 4096
MAX_EMBED_TITLE: Final[int] = 256

# Replies are capped below the 2000 character message limit
SUMMARY_MAX_LENGTH: Final[int] = 1900

SUCCESS_GLYPH: Final[str] = "✅"
FAILURE_GLYPH: Final[str] = "❌"

EVERYONE_TARGET: Final[str] = "@everyone"

DEFAULT_TEMPLATE_ID: Final[str] = "roblox_standard_v1"
AUDIT_REASON: Final[str] = "Guildsmith blueprint build"
EDIT_REASON: Final[str] = "Guildsmith edit"

NAMED_COLORS = {
    "black": 0x000000,
    "white": 0xFFFFFF,
    "red": 0xFF0000,
    "green": 0x00FF00,
    "blue": 0x0000FF,
    "yellow": 0xFFFF00,
    "orange": 0xFFA500,
    "purple": 0x800080,
    "pink": 0xFF69B4,
    "cyan": 0x00FFFF,
    "gray": 0x808080,
    "grey": 0x808080,
}
