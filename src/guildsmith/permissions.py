"""
Permission packs and access-override resolution.

Role permissions are declared in blueprints as a named pack; channel and
category overrides as textual flag names. Both resolve against the fixed
tables below and never fail on unknown input: an unknown pack grants
nothing and unknown flag names are dropped.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, FrozenSet, Optional

import discord

from .constants import EVERYONE_TARGET

if TYPE_CHECKING:
    from .blueprint import OverrideSpec

log = logging.getLogger("guildsmith.permissions")


PERMISSION_PACKS: dict[str, FrozenSet[str]] = {
    "owner": frozenset({"administrator"}),
    "admin": frozenset({
        "manage_guild",
        "manage_roles",
        "manage_channels",
        "kick_members",
        "ban_members",
        "moderate_members",
        "manage_messages",
        "view_audit_log",
    }),
    "mod": frozenset({
        "kick_members",
        "moderate_members",
        "manage_messages",
        "view_audit_log",
    }),
    "helper": frozenset({"manage_messages"}),
    "verified": frozenset(),
    "member": frozenset(),
    "ping": frozenset(),
}


def _pascal(flag: str) -> str:
    return "".join(part.capitalize() for part in flag.split("_"))


def _build_flag_table() -> dict[str, str]:
    # Accept discord.py attribute names, their PascalCase spelling
    # ("SendMessages") and SCREAMING_CASE ("SEND_MESSAGES").
    table: dict[str, str] = {}
    for flag in discord.Permissions.VALID_FLAGS:
        table[flag] = flag
        table[_pascal(flag)] = flag
        table[flag.upper()] = flag
    return table


PERMISSION_FLAGS: dict[str, str] = _build_flag_table()

_SEPARATORS_RE = re.compile(r"[\s-]+")


def flag_for_name(name: str) -> Optional[str]:
    """Map a textual permission name to a discord.py flag, or None."""
    raw = str(name or "").strip()
    if raw in PERMISSION_FLAGS:
        return PERMISSION_FLAGS[raw]
    return PERMISSION_FLAGS.get(_SEPARATORS_RE.sub("_", raw).lower())


def resolve_pack(pack_name: Optional[str]) -> FrozenSet[str]:
    """Return the flag names granted by a named pack (empty when unknown)."""
    key = str(pack_name or "").strip().lower()
    flags = PERMISSION_PACKS.get(key)
    if flags is None:
        if key:
            log.warning("Unknown permission pack %r; granting no permissions", pack_name)
        return frozenset()
    return flags


def pack_permissions(pack_name: Optional[str]) -> discord.Permissions:
    return discord.Permissions(**{flag: True for flag in resolve_pack(pack_name)})


@dataclass(frozen=True)
class OverrideRecord:
    """A resolved allow/deny rule for one concrete target."""
    target_id: int
    everyone: bool
    allow: FrozenSet[str]
    deny: FrozenSet[str]

    def to_overwrite(self) -> discord.PermissionOverwrite:
        values: dict[str, Optional[bool]] = {flag: True for flag in self.allow}
        # Deny wins when a flag is listed on both sides.
        values.update({flag: False for flag in self.deny})
        return discord.PermissionOverwrite(**values)


def _resolve_flags(names: list[str]) -> FrozenSet[str]:
    flags = set()
    for name in names or []:
        flag = flag_for_name(name)
        if flag is None:
            log.debug("Dropping unknown permission flag %r", name)
            continue
        flags.add(flag)
    return frozenset(flags)


def resolve_override(
    spec: "OverrideSpec",
    role_id_for_key: Callable[[str], Optional[int]],
    everyone_id: int,
) -> Optional[OverrideRecord]:
    """Resolve an override declaration into a concrete record.

    The everyone target takes precedence over a role key. Returns None when
    neither target resolves.
    """
    if spec.target == EVERYONE_TARGET:
        target_id: Optional[int] = everyone_id
    elif spec.target_role_key:
        target_id = role_id_for_key(spec.target_role_key)
    else:
        target_id = None

    if not target_id:
        return None

    return OverrideRecord(
        target_id=int(target_id),
        everyone=target_id == everyone_id,
        allow=_resolve_flags(spec.allow),
        deny=_resolve_flags(spec.deny),
    )
