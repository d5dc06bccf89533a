from __future__ import annotations

import re

from .constants import MAX_CHANNEL_NAME_LENGTH

_WHITESPACE_RE = re.compile(r"\s+")
_INVALID_RE = re.compile(r"[^a-z0-9-]")
_DASHES_RE = re.compile(r"-{2,}")


def normalize_channel_name(name: str) -> str:
    """Canonicalize a free-form name into a valid Discord text channel name.

    Examples:
    - "Welcome Area!" -> "welcome-area"
    - "  General   Chat " -> "general-chat"
    - "📜 rules" -> "rules"

    The result matches ``^[a-z0-9]+(-[a-z0-9]+)*$`` or is empty, and
    normalizing it again returns it unchanged.
    """
    s = (name or "").strip().lower()
    s = _WHITESPACE_RE.sub("-", s)
    s = _INVALID_RE.sub("-", s)
    s = _DASHES_RE.sub("-", s).strip("-")
    # Truncation can expose a dash at the cut point.
    return s[:MAX_CHANNEL_NAME_LENGTH].strip("-")


def names_match(left: str, right: str) -> bool:
    """Exact, case-insensitive display-name comparison."""
    return (left or "").strip().casefold() == (right or "").strip().casefold()
