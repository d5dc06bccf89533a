from __future__ import annotations

import contextlib
import logging
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

import discord

from ..colors import format_color, parse_color
from ..constants import EDIT_REASON, MAX_SLOWMODE_SECONDS
from ..locator import NameLocator, ResourceLocator
from ..naming import normalize_channel_name
from ..services.resource_state_store import ResourceStateStore
from .actions import (
    ACTION_TYPES,
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
from .rate_limiter import RateLimiter
from .results import ActionOutcome, ActionStatus

log = logging.getLogger("guildsmith.editor")

Handler = Callable[[discord.Guild, ResourceLocator, EditAction], Awaitable[ActionOutcome]]


def _applied(action: EditAction, message: str) -> ActionOutcome:
    return ActionOutcome(action.kind, ActionStatus.APPLIED, message)


def _failed(action: EditAction, message: str) -> ActionOutcome:
    return ActionOutcome(action.kind, ActionStatus.FAILED, message)


def _not_found(action: EditAction, what: str, name: str) -> ActionOutcome:
    return ActionOutcome(action.kind, ActionStatus.NOT_FOUND, f'{what} not found: "{name}"')


class EditEngine:
    """Applies edit actions one at a time against the live guild.

    Targets are resolved by display name, never through stored keys. Each
    action is attempted exactly once and yields one outcome; a failing action
    never stops the rest of the batch.
    """

    def __init__(
        self,
        rate_limiter: Optional[RateLimiter] = None,
        state_store: Optional[ResourceStateStore] = None,
    ) -> None:
        self.rate_limiter = rate_limiter or RateLimiter()
        self.state_store = state_store
        self._handlers: Dict[type, Handler] = {
            RecolorRole: self._recolor_role,
            RenameRole: self._rename_role,
            RenameChannel: self._rename_channel,
            RenameCategory: self._rename_category,
            CreateChannel: self._create_channel,
            LockChannel: self._lock_channel,
            UnlockChannel: self._unlock_channel,
            SetSlowmode: self._set_slowmode,
        }
        missing = [t.__name__ for t in ACTION_TYPES if t not in self._handlers]
        if missing:
            raise TypeError(f"EditEngine has no handler for: {', '.join(missing)}")

    async def apply_all(self, guild: discord.Guild, actions: Iterable[EditAction]) -> List[ActionOutcome]:
        lock = self.state_store.lock(guild.id) if self.state_store else contextlib.nullcontext()
        outcomes: List[ActionOutcome] = []
        async with lock:
            for action in actions:
                outcome = await self.apply(guild, action)
                log.info("Edit %s in guild %s: %s", action.kind, guild.id, outcome.status.value)
                outcomes.append(outcome)
        return outcomes

    async def apply(self, guild: discord.Guild, action: EditAction) -> ActionOutcome:
        handler = self._handlers.get(type(action))
        if handler is None:
            return ActionOutcome(action.kind, ActionStatus.UNKNOWN, f"Unknown action: {action.kind}")
        try:
            return await handler(guild, NameLocator(guild), action)
        except Exception as e:
            log.warning("Edit %s failed in guild %s: %s", action.kind, guild.id, e)
            return _failed(action, f"{action.kind} failed: {str(e) or type(e).__name__}")

    def _guard_role(self, guild: discord.Guild, role: discord.Role, action: EditAction) -> Optional[ActionOutcome]:
        """Refuse roles at or above the bot's highest role."""
        top = guild.me.top_role
        if role.position >= top.position:
            return ActionOutcome(
                action.kind,
                ActionStatus.GUARDED,
                f"I can't edit role **{role.name}** because it's higher than or equal to my top role.",
            )
        return None

    # Roles

    async def _recolor_role(self, guild: discord.Guild, locator: ResourceLocator, action: RecolorRole) -> ActionOutcome:
        role = locator.role(action.role_name)
        if role is None:
            return _not_found(action, "Role", action.role_name)
        guarded = self._guard_role(guild, role, action)
        if guarded:
            return guarded
        colour = parse_color(action.color)
        if colour is None:
            return _failed(action, f'Unknown color: "{action.color}". Try #000000 or "black".')
        await self.rate_limiter.execute(role.edit, colour=colour, reason=EDIT_REASON)
        return _applied(action, f"Changed role **{role.name}** color to **{format_color(colour)}**.")

    async def _rename_role(self, guild: discord.Guild, locator: ResourceLocator, action: RenameRole) -> ActionOutcome:
        if not action.new_name:
            return _failed(action, "No new role name given.")
        role = locator.role(action.role_name)
        if role is None:
            return _not_found(action, "Role", action.role_name)
        guarded = self._guard_role(guild, role, action)
        if guarded:
            return guarded
        old_name = role.name
        await self.rate_limiter.execute(role.edit, name=action.new_name, reason=EDIT_REASON)
        return _applied(action, f"Renamed role **{old_name}** to **{action.new_name}**.")

    # Channels and categories

    async def _rename_channel(self, guild: discord.Guild, locator: ResourceLocator, action: RenameChannel) -> ActionOutcome:
        new_name = normalize_channel_name(action.new_name)
        if not new_name:
            return _failed(action, f'"{action.new_name}" is not a usable channel name.')
        channel = locator.channel(action.channel_name)
        if channel is None:
            return _not_found(action, "Channel", action.channel_name)
        await self.rate_limiter.execute(channel.edit, name=new_name, reason=EDIT_REASON)
        return _applied(action, f"Renamed channel to **{new_name}**.")

    async def _rename_category(self, guild: discord.Guild, locator: ResourceLocator, action: RenameCategory) -> ActionOutcome:
        if not action.new_name:
            return _failed(action, "No new category name given.")
        category = locator.category(action.category_name)
        if category is None:
            return _not_found(action, "Category", action.category_name)
        await self.rate_limiter.execute(category.edit, name=action.new_name, reason=EDIT_REASON)
        return _applied(action, f"Renamed category to **{action.new_name}**.")

    async def _create_channel(self, guild: discord.Guild, locator: ResourceLocator, action: CreateChannel) -> ActionOutcome:
        name = normalize_channel_name(action.channel_name)
        if not name:
            return _failed(action, f'"{action.channel_name}" is not a usable channel name.')
        category = locator.category(action.category_name)
        if category is None:
            return _not_found(action, "Category", action.category_name)
        created = await self.rate_limiter.execute(
            guild.create_text_channel, name, category=category, reason=EDIT_REASON
        )
        return _applied(action, f"Created channel **#{created.name}** in **{category.name}**.")

    async def _set_send_messages(self, guild: discord.Guild, channel, value: Optional[bool]) -> None:
        everyone = guild.default_role
        overwrite = channel.overwrites_for(everyone)
        overwrite.send_messages = value
        await self.rate_limiter.execute(channel.set_permissions, everyone, overwrite=overwrite, reason=EDIT_REASON)

    async def _lock_channel(self, guild: discord.Guild, locator: ResourceLocator, action: LockChannel) -> ActionOutcome:
        channel = locator.channel(action.channel_name)
        if channel is None:
            return _not_found(action, "Channel", action.channel_name)
        await self._set_send_messages(guild, channel, False)
        return _applied(action, f"🔒 Locked **#{channel.name}** (everyone can't send).")

    async def _unlock_channel(self, guild: discord.Guild, locator: ResourceLocator, action: UnlockChannel) -> ActionOutcome:
        channel = locator.channel(action.channel_name)
        if channel is None:
            return _not_found(action, "Channel", action.channel_name)
        await self._set_send_messages(guild, channel, None)
        return _applied(action, f"🔓 Unlocked **#{channel.name}**.")

    async def _set_slowmode(self, guild: discord.Guild, locator: ResourceLocator, action: SetSlowmode) -> ActionOutcome:
        channel = locator.channel(action.channel_name)
        if channel is None:
            return _not_found(action, "Channel", action.channel_name)
        seconds = min(max(0, int(action.seconds)), MAX_SLOWMODE_SECONDS)
        await self.rate_limiter.execute(channel.edit, slowmode_delay=seconds, reason=EDIT_REASON)
        return _applied(action, f"Set slowmode on **#{channel.name}** to **{seconds}s**.")
