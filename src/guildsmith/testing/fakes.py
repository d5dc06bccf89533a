from __future__ import annotations

import itertools
from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Tuple

import discord

_ids = itertools.count(100_000)


def next_id() -> int:
    return next(_ids)


def http_error(status: int, message: str = "error", retry_after: Optional[float] = None) -> discord.HTTPException:
    """Build a discord.py HTTP error without a real aiohttp response."""
    headers = {"Retry-After": str(retry_after)} if retry_after is not None else {}
    response = SimpleNamespace(status=status, reason=message, headers=headers)
    if status == 403:
        return discord.Forbidden(response, message)
    if status == 404:
        return discord.NotFound(response, message)
    return discord.HTTPException(response, message)


class FakeRole:
    """Fake Discord Role for testing."""

    def __init__(
        self,
        guild: "FakeGuild",
        id: int,
        name: str,
        position: int = 1,
        colour: Optional[discord.Colour] = None,
        permissions: Optional[discord.Permissions] = None,
        hoist: bool = False,
        mentionable: bool = False,
    ):
        self.guild = guild
        self.id = id
        self.name = name
        self.position = position
        self.colour = colour or discord.Colour.default()
        self.permissions = permissions or discord.Permissions.none()
        self.hoist = hoist
        self.mentionable = mentionable

    def is_default(self) -> bool:
        return self.id == self.guild.id

    async def edit(self, **kwargs: Any) -> "FakeRole":
        self.guild._record("role.edit", self.name, **kwargs)
        if "name" in kwargs:
            self.name = kwargs["name"]
        if "colour" in kwargs:
            self.colour = kwargs["colour"]
        return self

    def __repr__(self):
        return f"<FakeRole id={self.id} name={self.name} position={self.position}>"


class _FakeChannelBase:
    type: discord.ChannelType

    def __init__(self, guild: "FakeGuild", id: int, name: str, category: Optional["FakeCategory"] = None):
        self.guild = guild
        self.id = id
        self.name = name
        self.category = category
        self.overwrites: Dict[Any, discord.PermissionOverwrite] = {}

    def overwrites_for(self, target: Any) -> discord.PermissionOverwrite:
        current = self.overwrites.get(target)
        if current is None:
            return discord.PermissionOverwrite()
        allow, deny = current.pair()
        return discord.PermissionOverwrite.from_pair(allow, deny)

    async def set_permissions(self, target: Any, *, overwrite: discord.PermissionOverwrite, reason: str = None) -> None:
        self.guild._record("set_permissions", self.name, overwrite=overwrite)
        self.overwrites[target] = overwrite

    async def edit(self, **kwargs: Any) -> "_FakeChannelBase":
        self.guild._record("channel.edit", self.name, **kwargs)
        for attr in ("name", "topic"):
            if attr in kwargs:
                setattr(self, attr, kwargs[attr])
        if "slowmode_delay" in kwargs:
            self.slowmode_delay = kwargs["slowmode_delay"]
        return self

    def __repr__(self):
        return f"<{type(self).__name__} id={self.id} name={self.name}>"


class FakeCategory(_FakeChannelBase):
    """Fake Discord CategoryChannel for testing."""

    type = discord.ChannelType.category


class FakeTextChannel(_FakeChannelBase):
    """Fake Discord TextChannel for testing; keeps every sent message."""

    type = discord.ChannelType.text

    def __init__(self, guild: "FakeGuild", id: int, name: str, category: Optional[FakeCategory] = None):
        super().__init__(guild, id, name, category)
        self.topic = ""
        self.slowmode_delay = 0
        self.sent: List[Dict[str, Any]] = []

    async def send(self, content: Optional[str] = None, *, embed: Optional[discord.Embed] = None) -> SimpleNamespace:
        self.guild._record("send", self.name, content=content, embed=embed)
        self.sent.append({"content": content, "embed": embed})
        return SimpleNamespace(id=next_id(), content=content, embed=embed)


class FakeVoiceChannel(_FakeChannelBase):
    """Fake Discord VoiceChannel for testing."""

    type = discord.ChannelType.voice


class FakeMember:
    """Fake bot member; only the top role matters to the engines."""

    def __init__(self, id: int, name: str, top_role: FakeRole):
        self.id = id
        self.name = name
        self.top_role = top_role


class FakeGuild:
    """Fake Discord Guild for testing.

    Every mutating call is appended to ``calls`` as ``(method, name, kwargs)``
    in the order it happened. ``fail(method, error)`` makes a method raise
    instead of acting, optionally only for one resource name.
    """

    def __init__(self, id: int = 4242, name: str = "TestGuild", bot_position: int = 10):
        self.id = id
        self.name = name
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []
        self._failures: List[Tuple[str, Optional[str], Exception]] = []
        self._roles: List[FakeRole] = []
        self._channels: List[_FakeChannelBase] = []

        self.default_role = FakeRole(self, id, "@everyone", position=0)
        bot_role = FakeRole(self, next_id(), "Guildsmith", position=bot_position)
        self._roles.extend([self.default_role, bot_role])
        self.me = FakeMember(next_id(), "Guildsmith", bot_role)

    # Failure injection and call log

    def fail(self, method: str, error: Exception, name: Optional[str] = None) -> None:
        self._failures.append((method, name, error))

    def _check_failure(self, method: str, name: str, /) -> None:
        for fail_method, fail_name, error in self._failures:
            if fail_method == method and (fail_name is None or fail_name == name):
                raise error

    def _record(self, method: str, name: str, /, **kwargs: Any) -> None:
        self._check_failure(method, name)
        self.calls.append((method, name, kwargs))

    def call_names(self) -> List[str]:
        return [c[0] for c in self.calls]

    # Cache views

    @property
    def roles(self) -> List[FakeRole]:
        return sorted(self._roles, key=lambda r: r.position)

    @property
    def categories(self) -> List[FakeCategory]:
        return [c for c in self._channels if isinstance(c, FakeCategory)]

    @property
    def text_channels(self) -> List[FakeTextChannel]:
        return [c for c in self._channels if isinstance(c, FakeTextChannel)]

    @property
    def voice_channels(self) -> List[FakeVoiceChannel]:
        return [c for c in self._channels if isinstance(c, FakeVoiceChannel)]

    def get_role(self, role_id: int) -> Optional[FakeRole]:
        return next((r for r in self._roles if r.id == role_id), None)

    def get_channel(self, channel_id: int) -> Optional[_FakeChannelBase]:
        return next((c for c in self._channels if c.id == channel_id), None)

    async def fetch_channel(self, channel_id: int) -> _FakeChannelBase:
        self._check_failure("fetch_channel", str(channel_id))
        channel = self.get_channel(channel_id)
        if channel is None:
            raise http_error(404, "Unknown Channel")
        return channel

    # Seeding helpers

    def add_role(self, name: str, position: int = 1) -> FakeRole:
        role = FakeRole(self, next_id(), name, position=position)
        self._roles.append(role)
        return role

    def add_category(self, name: str) -> FakeCategory:
        category = FakeCategory(self, next_id(), name)
        self._channels.append(category)
        return category

    def add_text_channel(self, name: str, category: Optional[FakeCategory] = None) -> FakeTextChannel:
        channel = FakeTextChannel(self, next_id(), name, category)
        self._channels.append(channel)
        return channel

    def remove(self, resource: Any) -> None:
        """Simulate a resource deleted outside the bot."""
        if resource in self._roles:
            self._roles.remove(resource)
        if resource in self._channels:
            self._channels.remove(resource)

    # Remote mutations

    async def create_role(self, *, name: str, reason: str = None, **kwargs: Any) -> FakeRole:
        self._record("create_role", name, **kwargs)
        role = FakeRole(
            self,
            next_id(),
            name,
            position=1,
            colour=kwargs.get("colour"),
            permissions=kwargs.get("permissions"),
            hoist=kwargs.get("hoist", False),
            mentionable=kwargs.get("mentionable", False),
        )
        # New roles land just above @everyone.
        for other in self._roles:
            if other.position >= 1:
                other.position += 1
        self._roles.append(role)
        return role

    async def edit_role_positions(self, positions: Dict[FakeRole, int], *, reason: str = None) -> List[FakeRole]:
        self._record("edit_role_positions", "", positions={r.name: p for r, p in positions.items()})
        for role, position in positions.items():
            role.position = position
        return self.roles

    async def create_category(self, name: str, *, overwrites: Optional[dict] = None, reason: str = None) -> FakeCategory:
        self._record("create_category", name, overwrites=overwrites or {})
        category = FakeCategory(self, next_id(), name)
        category.overwrites = dict(overwrites or {})
        self._channels.append(category)
        return category

    async def create_text_channel(
        self,
        name: str,
        *,
        category: Optional[FakeCategory] = None,
        reason: str = None,
        **kwargs: Any,
    ) -> FakeTextChannel:
        self._record("create_text_channel", name, category=category, **kwargs)
        channel = FakeTextChannel(self, next_id(), name, category)
        channel.topic = kwargs.get("topic", "")
        channel.overwrites = dict(kwargs.get("overwrites") or {})
        channel.slowmode_delay = kwargs.get("slowmode_delay", 0)
        self._channels.append(channel)
        return channel

    async def create_voice_channel(
        self,
        name: str,
        *,
        category: Optional[FakeCategory] = None,
        reason: str = None,
        **kwargs: Any,
    ) -> FakeVoiceChannel:
        self._record("create_voice_channel", name, category=category, **kwargs)
        channel = FakeVoiceChannel(self, next_id(), name, category)
        channel.overwrites = dict(kwargs.get("overwrites") or {})
        self._channels.append(channel)
        return channel

    def __repr__(self):
        return f"<FakeGuild id={self.id} name={self.name}>"
