"""
Blueprint Specification

Declarative description of a server: roles, categories with their channels
and overrides, and starter messages. Specs reference each other only through
their logical ``key``; remote ids never appear in a blueprint.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .constants import EVERYONE_TARGET
from .errors import BlueprintValidationError
from .naming import normalize_channel_name
from .permissions import PERMISSION_PACKS, flag_for_name

log = logging.getLogger("guildsmith.blueprint")


class ChannelKind(Enum):
    """Channel type enumeration."""
    TEXT = "text"
    VOICE = "voice"


class MessageKind(Enum):
    EMBED = "embed"
    TEXT = "text"


@dataclass(frozen=True)
class OverrideSpec:
    target: Optional[str] = None
    target_role_key: Optional[str] = None
    allow: List[str] = field(default_factory=list)
    deny: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OverrideSpec":
        return cls(
            target=data.get("target") or None,
            target_role_key=data.get("targetRoleKey") or None,
            allow=[str(p) for p in data.get("allow") or []],
            deny=[str(p) for p in data.get("deny") or []],
        )


@dataclass(frozen=True)
class RoleSpec:
    key: str
    name: str
    color: Optional[str] = None
    perm_pack: str = ""
    hoist: bool = False
    mentionable: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoleSpec":
        return cls(
            key=str(data["key"]),
            name=str(data["name"]),
            color=data.get("color") or None,
            perm_pack=str(data.get("permPack") or ""),
            hoist=bool(data.get("hoist", False)),
            mentionable=bool(data.get("mentionable", False)),
        )


@dataclass(frozen=True)
class ChannelSpec:
    key: str
    name: str
    kind: ChannelKind = ChannelKind.TEXT
    topic: str = ""
    slowmode: int = 0
    overrides: List[OverrideSpec] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChannelSpec":
        return cls(
            key=str(data["key"]),
            name=str(data["name"]),
            kind=ChannelKind(str(data.get("type") or "text").lower()),
            topic=str(data.get("topic") or ""),
            slowmode=int(data.get("slowmode") or 0),
            overrides=[OverrideSpec.from_dict(o) for o in data.get("overwrites") or []],
        )


@dataclass(frozen=True)
class CategorySpec:
    key: str
    name: str
    channels: List[ChannelSpec] = field(default_factory=list)
    overrides: List[OverrideSpec] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CategorySpec":
        return cls(
            key=str(data["key"]),
            name=str(data["name"]),
            channels=[ChannelSpec.from_dict(c) for c in data.get("channels") or []],
            overrides=[OverrideSpec.from_dict(o) for o in data.get("overwrites") or []],
        )


@dataclass(frozen=True)
class MessageSpec:
    channel_key: str
    kind: MessageKind = MessageKind.TEXT
    title: str = ""
    description: str = ""
    content: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MessageSpec":
        return cls(
            channel_key=str(data["channelKey"]),
            kind=MessageKind(str(data.get("type") or "text").lower()),
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            content=str(data.get("content") or ""),
        )


@dataclass(frozen=True)
class Blueprint:
    name: str
    language: str = "EN"
    theme: str = ""
    roles: List[RoleSpec] = field(default_factory=list)
    categories: List[CategorySpec] = field(default_factory=list)
    messages: List[MessageSpec] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "Blueprint":
        """Validate raw blueprint JSON and build the spec tree.

        Raises BlueprintValidationError on errors; warnings are logged.
        """
        result = validate_blueprint(data)
        for warning in result.warnings:
            log.warning("Blueprint %s: %s", warning.field, warning.message)
        if not result.is_valid():
            raise BlueprintValidationError([f"{e.field}: {e.message}" for e in result.errors])

        return cls(
            name=str(data["name"]),
            language=str(data.get("language") or "EN"),
            theme=str(data.get("theme") or ""),
            roles=[RoleSpec.from_dict(r) for r in data.get("roles") or []],
            categories=[CategorySpec.from_dict(c) for c in data.get("categories") or []],
            messages=[MessageSpec.from_dict(m) for m in data.get("messages") or []],
        )


def apply_defaults(data: Dict[str, Any]) -> Dict[str, Any]:
    """Fill the documented per-field defaults into generated blueprint JSON."""
    out = dict(data)
    out["roles"] = [
        {"hoist": False, "mentionable": False, **r} if isinstance(r, dict) else r
        for r in out.get("roles") or []
    ]
    categories = []
    for c in out.get("categories") or []:
        if isinstance(c, dict):
            c = {"overwrites": [], "channels": [], **c}
            c["channels"] = [
                {"type": "text", "topic": "", "slowmode": 0, **ch} if isinstance(ch, dict) else ch
                for ch in c.get("channels") or []
            ]
        categories.append(c)
    out["categories"] = categories
    out["messages"] = out.get("messages") or []
    return out


@dataclass
class ValidationError:
    """Validation error information."""
    field: str
    message: str
    severity: str  # "error", "warning"


class ValidationResult:
    """Result of validation with errors and warnings."""

    def __init__(self) -> None:
        self.errors: List[ValidationError] = []
        self.warnings: List[ValidationError] = []

    def add_error(self, field: str, message: str) -> None:
        self.errors.append(ValidationError(field, message, "error"))

    def add_warning(self, field: str, message: str) -> None:
        self.warnings.append(ValidationError(field, message, "warning"))

    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def get_summary(self) -> str:
        if not self.errors and not self.warnings:
            return "✅ Blueprint is valid"
        parts = []
        if self.errors:
            parts.append(f"❌ {len(self.errors)} errors")
        if self.warnings:
            parts.append(f"⚠️ {len(self.warnings)} warnings")
        return f"Validation complete: {', '.join(parts)}"


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _check_list(result: ValidationResult, where: str, value: Any) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        result.add_error(where, "must be a list")
        return []
    return value


def _check_keyed(result: ValidationResult, where: str, item: Any) -> bool:
    if not isinstance(item, dict):
        result.add_error(where, "must be an object")
        return False
    if not _is_text(item.get("key")):
        result.add_error(where, "missing key")
    if not _is_text(item.get("name")):
        result.add_error(where, "missing name")
    return True


def _check_flags(result: ValidationResult, where: str, names: Any) -> None:
    for name in _check_list(result, where, names):
        if flag_for_name(str(name)) is None:
            result.add_warning(where, f"unknown permission flag {name!r} will be ignored")


def _warn_duplicates(result: ValidationResult, where: str, keys: List[str]) -> None:
    for key, count in Counter(keys).items():
        if count > 1:
            result.add_warning(where, f"key {key!r} declared {count} times; the last declaration wins")


def _check_overrides(result: ValidationResult, where: str, overrides: Any, role_keys: List[str]) -> None:
    for j, ow in enumerate(_check_list(result, f"{where}.overwrites", overrides)):
        ow_where = f"{where}.overwrites[{j}]"
        if not isinstance(ow, dict):
            result.add_error(ow_where, "must be an object")
            continue
        everyone = ow.get("target") == EVERYONE_TARGET
        role_key = ow.get("targetRoleKey")
        if everyone and role_key:
            result.add_error(ow_where, "targets both @everyone and a role key")
        elif not everyone and not role_key:
            result.add_warning(ow_where, "has no target and will be ignored")
        elif role_key and role_key not in role_keys:
            result.add_warning(ow_where, f"role key {role_key!r} is not declared in this blueprint")
        _check_flags(result, f"{ow_where}.allow", ow.get("allow"))
        _check_flags(result, f"{ow_where}.deny", ow.get("deny"))


def validate_blueprint(data: Any) -> ValidationResult:
    """Validate raw blueprint JSON without building anything."""
    result = ValidationResult()
    if not isinstance(data, dict):
        result.add_error("blueprint", "must be a JSON object")
        return result

    if not _is_text(data.get("name")):
        result.add_error("name", "is required")

    role_keys: List[str] = []
    for i, role in enumerate(_check_list(result, "roles", data.get("roles"))):
        where = f"roles[{i}]"
        if not _check_keyed(result, where, role):
            continue
        role_keys.append(str(role.get("key")))
        for flag in ("hoist", "mentionable"):
            if flag in role and not isinstance(role[flag], bool):
                result.add_error(where, f"{flag} must be true or false")
        pack = role.get("permPack")
        if pack and str(pack).strip().lower() not in PERMISSION_PACKS:
            result.add_warning(where, f"unknown permission pack {pack!r} grants no permissions")
    _warn_duplicates(result, "roles", role_keys)

    category_keys: List[str] = []
    channel_keys: List[str] = []
    for i, cat in enumerate(_check_list(result, "categories", data.get("categories"))):
        where = f"categories[{i}]"
        if not _check_keyed(result, where, cat):
            continue
        category_keys.append(str(cat.get("key")))

        _check_overrides(result, where, cat.get("overwrites"), role_keys)

        for j, ch in enumerate(_check_list(result, f"{where}.channels", cat.get("channels"))):
            ch_where = f"{where}.channels[{j}]"
            if not _check_keyed(result, ch_where, ch):
                continue
            channel_keys.append(str(ch.get("key")))
            _check_overrides(result, ch_where, ch.get("overwrites"), role_keys)
            kind = str(ch.get("type") or "text").lower()
            if kind not in {k.value for k in ChannelKind}:
                result.add_error(ch_where, f"unknown channel type {kind!r}")
            if _is_text(ch.get("name")) and not normalize_channel_name(ch["name"]):
                result.add_error(ch_where, f"name {ch['name']!r} has no usable characters")
            slowmode = ch.get("slowmode") or 0
            if isinstance(slowmode, bool) or not isinstance(slowmode, int):
                result.add_error(ch_where, "slowmode must be an integer")
            elif slowmode < 0:
                result.add_error(ch_where, "slowmode must not be negative")
    _warn_duplicates(result, "categories", category_keys)
    _warn_duplicates(result, "channels", channel_keys)

    for i, msg in enumerate(_check_list(result, "messages", data.get("messages"))):
        where = f"messages[{i}]"
        if not isinstance(msg, dict):
            result.add_error(where, "must be an object")
            continue
        if not _is_text(msg.get("channelKey")):
            result.add_error(where, "missing channelKey")
        elif msg["channelKey"] not in channel_keys:
            result.add_warning(where, f"channel key {msg['channelKey']!r} is not declared in this blueprint")
        kind = str(msg.get("type") or "text").lower()
        if kind not in {k.value for k in MessageKind}:
            result.add_error(where, f"unknown message type {kind!r}")
        elif kind == MessageKind.TEXT.value and not _is_text(msg.get("content")):
            result.add_error(where, "text message has no content")

    return result
