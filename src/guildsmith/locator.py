"""
Resource lookup strategies.

Builds address resources by the logical keys recorded in the State Store;
edits address them by their current display name in the live guild cache.
"""

from __future__ import annotations

from typing import Iterable, Optional, Protocol, TypeVar

import discord

from .naming import names_match
from .services.resource_state_store import ResourceState

T = TypeVar("T")


class ResourceLocator(Protocol):
    def role(self, ref: str) -> Optional[discord.Role]:
        ...

    def category(self, ref: str) -> Optional[discord.CategoryChannel]:
        ...

    def channel(self, ref: str) -> Optional[discord.abc.GuildChannel]:
        ...


def is_category(channel: object) -> bool:
    return getattr(channel, "type", None) == discord.ChannelType.category


def is_message_capable(channel: object) -> bool:
    return getattr(channel, "type", None) in (discord.ChannelType.text, discord.ChannelType.news)


class KeyLocator:
    """Logical key -> State Store id -> live object."""

    def __init__(self, guild: discord.Guild, state: ResourceState) -> None:
        self.guild = guild
        self.state = state

    def role_id(self, key: str) -> Optional[int]:
        return self.state.roles.get(key)

    def role(self, ref: str) -> Optional[discord.Role]:
        role_id = self.state.roles.get(ref)
        return self.guild.get_role(role_id) if role_id else None

    def category(self, ref: str) -> Optional[discord.CategoryChannel]:
        channel_id = self.state.categories.get(ref)
        channel = self.guild.get_channel(channel_id) if channel_id else None
        return channel if is_category(channel) else None

    def channel(self, ref: str) -> Optional[discord.abc.GuildChannel]:
        channel_id = self.state.channels.get(ref)
        return self.guild.get_channel(channel_id) if channel_id else None


def _first_named(candidates: Iterable[T], name: str) -> Optional[T]:
    for candidate in candidates:
        if names_match(getattr(candidate, "name", ""), name):
            return candidate
    return None


class NameLocator:
    """Exact, case-insensitive display-name match over the live guild."""

    def __init__(self, guild: discord.Guild) -> None:
        self.guild = guild

    def role(self, ref: str) -> Optional[discord.Role]:
        return _first_named((r for r in self.guild.roles if not r.is_default()), ref)

    def category(self, ref: str) -> Optional[discord.CategoryChannel]:
        return _first_named(self.guild.categories, ref)

    def channel(self, ref: str) -> Optional[discord.abc.GuildChannel]:
        return _first_named(self.guild.text_channels, ref)
