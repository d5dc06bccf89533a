from __future__ import annotations

import re
from typing import Optional

import discord

from .constants import NAMED_COLORS

_HEX_RE = re.compile(r"^#?([0-9a-f]{6})$")


def parse_color(value: object) -> Optional[discord.Colour]:
    """Parse a colour name, ``#RRGGBB`` or ``RRGGBB`` into a Colour.

    Returns None when the value is not recognised.
    """
    s = str(value or "").strip().lower()
    if s in NAMED_COLORS:
        return discord.Colour(NAMED_COLORS[s])
    m = _HEX_RE.match(s)
    if not m:
        return None
    return discord.Colour(int(m.group(1), 16))


def format_color(colour: discord.Colour) -> str:
    return f"#{colour.value:06x}"
