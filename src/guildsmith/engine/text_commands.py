"""
Plain-text edit commands.

Each line (or ``;``-separated clause) must match one of the patterns below,
case-insensitively. Parsing is all-or-nothing: one unrecognised line rejects
the whole command so nothing runs on a half-understood request.
"""

from __future__ import annotations

import re
from typing import Callable, List, Pattern, Tuple

from ..errors import EditCommandError
from .actions import (
    CreateChannel,
    EditAction,
    LockChannel,
    RecolorRole,
    RenameCategory,
    RenameChannel,
    RenameRole,
    SetSlowmode,
    UnlockChannel,
)

USAGE = (
    "• change role Admin color to black\n"
    "• rename role Helper to Support\n"
    "• rename channel chat to general\n"
    "• rename category 📌 INFO to INFO\n"
    "• create channel trading in category 💬 COMMUNITY\n"
    "• lock channel announcements / unlock channel announcements\n"
    "• set slowmode general to 10"
)

_RULES: List[Tuple[Pattern[str], Callable[[re.Match], EditAction]]] = [
    (
        re.compile(r"^change\s+role\s+(.+?)\s+colou?r\s+to\s+(.+)$", re.I),
        lambda m: RecolorRole(role_name=m.group(1).strip(), color=m.group(2).strip()),
    ),
    (
        re.compile(r"^rename\s+role\s+(.+?)\s+to\s+(.+)$", re.I),
        lambda m: RenameRole(role_name=m.group(1).strip(), new_name=m.group(2).strip()),
    ),
    (
        re.compile(r"^rename\s+channel\s+#?(.+?)\s+to\s+(.+)$", re.I),
        lambda m: RenameChannel(channel_name=m.group(1).strip(), new_name=m.group(2).strip()),
    ),
    (
        re.compile(r"^rename\s+category\s+(.+?)\s+to\s+(.+)$", re.I),
        lambda m: RenameCategory(category_name=m.group(1).strip(), new_name=m.group(2).strip()),
    ),
    (
        re.compile(r"^create\s+channel\s+#?(.+?)\s+in\s+category\s+(.+)$", re.I),
        lambda m: CreateChannel(channel_name=m.group(1).strip(), category_name=m.group(2).strip()),
    ),
    (
        re.compile(r"^lock\s+channel\s+#?(.+)$", re.I),
        lambda m: LockChannel(channel_name=m.group(1).strip()),
    ),
    (
        re.compile(r"^unlock\s+channel\s+#?(.+)$", re.I),
        lambda m: UnlockChannel(channel_name=m.group(1).strip()),
    ),
    (
        re.compile(r"^set\s+slow-?mode\s+(?:on\s+|for\s+)?#?(.+?)\s+to\s+(\d+)\s*(?:s|sec|secs|seconds)?$", re.I),
        lambda m: SetSlowmode(channel_name=m.group(1).strip(), seconds=int(m.group(2))),
    ),
]

_SPLIT_RE = re.compile(r"[;\n]+")


def parse_line(line: str) -> EditAction:
    text = line.strip()
    for pattern, build in _RULES:
        m = pattern.match(text)
        if m:
            return build(m)
    raise EditCommandError(text, USAGE)


def parse_edit_command(raw_text: str) -> List[EditAction]:
    """Parse free text into edit actions, one per non-empty line or clause."""
    lines = [part.strip() for part in _SPLIT_RE.split(raw_text or "") if part.strip()]
    if not lines:
        raise EditCommandError(raw_text or "", USAGE)
    return [parse_line(line) for line in lines]
