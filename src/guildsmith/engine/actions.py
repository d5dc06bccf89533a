from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Union


@dataclass(frozen=True)
class RecolorRole:
    kind: ClassVar[str] = "edit_role_color"
    role_name: str
    color: str


@dataclass(frozen=True)
class RenameRole:
    kind: ClassVar[str] = "rename_role"
    role_name: str
    new_name: str


@dataclass(frozen=True)
class RenameChannel:
    kind: ClassVar[str] = "rename_channel"
    channel_name: str
    new_name: str


@dataclass(frozen=True)
class RenameCategory:
    kind: ClassVar[str] = "rename_category"
    category_name: str
    new_name: str


@dataclass(frozen=True)
class CreateChannel:
    kind: ClassVar[str] = "create_channel"
    channel_name: str
    category_name: str


@dataclass(frozen=True)
class LockChannel:
    kind: ClassVar[str] = "lock_channel"
    channel_name: str


@dataclass(frozen=True)
class UnlockChannel:
    kind: ClassVar[str] = "unlock_channel"
    channel_name: str


@dataclass(frozen=True)
class SetSlowmode:
    kind: ClassVar[str] = "set_slowmode"
    channel_name: str
    seconds: int


@dataclass(frozen=True)
class UnknownAction:
    """An action tag outside the supported set; reported, never applied."""
    kind: str


EditAction = Union[
    RecolorRole,
    RenameRole,
    RenameChannel,
    RenameCategory,
    CreateChannel,
    LockChannel,
    UnlockChannel,
    SetSlowmode,
    UnknownAction,
]

ACTION_TYPES = (
    RecolorRole,
    RenameRole,
    RenameChannel,
    RenameCategory,
    CreateChannel,
    LockChannel,
    UnlockChannel,
    SetSlowmode,
)


def _text(data: Dict[str, Any], name: str) -> str:
    return str(data.get(name) or "").strip()


def _int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def action_from_dict(data: Dict[str, Any]) -> EditAction:
    """Build an action from the generation wire shape; unused fields are ignored."""
    tag = _text(data, "action").lower()
    if tag == RecolorRole.kind:
        return RecolorRole(role_name=_text(data, "roleName"), color=_text(data, "color"))
    if tag == RenameRole.kind:
        return RenameRole(role_name=_text(data, "roleName"), new_name=_text(data, "newName"))
    if tag == RenameChannel.kind:
        return RenameChannel(channel_name=_text(data, "channelName"), new_name=_text(data, "newName"))
    if tag == RenameCategory.kind:
        return RenameCategory(category_name=_text(data, "categoryName"), new_name=_text(data, "newName"))
    if tag == CreateChannel.kind:
        return CreateChannel(
            channel_name=_text(data, "createChannelName") or _text(data, "channelName"),
            category_name=_text(data, "inCategoryName") or _text(data, "categoryName"),
        )
    if tag == LockChannel.kind:
        return LockChannel(channel_name=_text(data, "channelName"))
    if tag == UnlockChannel.kind:
        return UnlockChannel(channel_name=_text(data, "channelName"))
    if tag == SetSlowmode.kind:
        return SetSlowmode(channel_name=_text(data, "channelName"), seconds=_int(data.get("slowmode")))
    return UnknownAction(kind=tag or "(missing)")


def actions_from_list(items: Any) -> List[EditAction]:
    if not isinstance(items, list):
        return []
    return [action_from_dict(item) if isinstance(item, dict) else UnknownAction(kind=type(item).__name__) for item in items]
