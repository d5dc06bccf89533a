from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Set, Union

import discord

from ..blueprint import Blueprint, CategorySpec, ChannelKind, ChannelSpec, MessageKind, MessageSpec, RoleSpec
from ..colors import parse_color
from ..constants import AUDIT_REASON, MAX_EMBED_DESCRIPTION, MAX_EMBED_TITLE, MAX_SLOWMODE_SECONDS
from ..errors import BuildError, GuildsmithError
from ..locator import KeyLocator, ResourceLocator, is_message_capable
from ..naming import normalize_channel_name
from ..permissions import pack_permissions, resolve_override
from ..services.resource_state_store import ResourceState, ResourceStateStore
from .rate_limiter import RateLimiter
from .results import BuildResult, StepOutcome, StepStatus

log = logging.getLogger("guildsmith.builder")


@dataclass
class _BuildRun:
    guild: discord.Guild
    blueprint: Blueprint
    state: ResourceState
    previous: ResourceState
    result: BuildResult
    roles: Dict[int, discord.Role] = field(default_factory=dict)
    channels: Dict[int, discord.abc.GuildChannel] = field(default_factory=dict)
    seen: Dict[str, Set[str]] = field(default_factory=lambda: {"roles": set(), "categories": set(), "channels": set()})

    def first_use(self, kind: str, key: str) -> bool:
        if key in self.seen[kind]:
            return False
        self.seen[kind].add(key)
        return True

    @property
    def existing(self) -> ResourceLocator:
        """Resources recorded by earlier builds that are still live."""
        return KeyLocator(self.guild, self.previous)


class BlueprintBuilder:
    """Creates a blueprint's roles, categories, channels and starter messages.

    Steps run strictly in order because later steps reference earlier ones by
    logical key. Role positioning is best-effort; any other remote failure
    aborts the build with BuildError after persisting the mappings recorded
    so far. Keys already in the stored state are reused when their remote
    resource still exists (unless reuse_existing is off).
    """

    def __init__(
        self,
        state_store: ResourceStateStore,
        rate_limiter: Optional[RateLimiter] = None,
        *,
        reuse_existing: bool = True,
    ) -> None:
        self.state_store = state_store
        self.rate_limiter = rate_limiter or RateLimiter()
        self.reuse_existing = reuse_existing

    async def build(self, guild: discord.Guild, blueprint: Blueprint) -> BuildResult:
        async with self.state_store.lock(guild.id):
            state = await self.state_store.load(guild.id)
            run = _BuildRun(
                guild=guild,
                blueprint=blueprint,
                state=state,
                previous=state.copy() if self.reuse_existing else ResourceState(),
                result=BuildResult(blueprint_name=blueprint.name, state=state),
            )
            log.info("Building blueprint %r in guild %s", blueprint.name, guild.id)

            step = "Roles"
            try:
                for spec in blueprint.roles:
                    await self._create_role(run, spec)
                await self.state_store.save(guild.id, state)
                run.result.steps.append(StepOutcome(step, StepStatus.SUCCEEDED))

                run.result.steps.append(await self._position_roles(run))

                step = "Categories"
                for spec in blueprint.categories:
                    await self._create_category(run, spec)
                    await self.state_store.save(guild.id, state)
                run.result.steps.append(StepOutcome(step, StepStatus.SUCCEEDED))

                step = "Messages"
                for spec in blueprint.messages:
                    await self._post_message(run, spec)
                run.result.steps.append(StepOutcome(step, StepStatus.SUCCEEDED))

                await self.state_store.save(guild.id, state)
            except GuildsmithError:
                raise
            except Exception as e:
                log.exception("Build of %r failed during %s", blueprint.name, step)
                run.result.steps.append(StepOutcome(step, StepStatus.FATAL, str(e)))
                await self.state_store.save(guild.id, state)
                raise BuildError(step, str(e) or type(e).__name__) from e

        log.info(
            "Built %r: created=%s reused=%s messages=%d skipped=%d",
            blueprint.name, run.result.created, run.result.reused,
            run.result.messages_sent, run.result.messages_skipped,
        )
        return run.result

    # Roles

    async def _create_role(self, run: _BuildRun, spec: RoleSpec) -> None:
        if run.first_use("roles", spec.key):
            existing = run.existing.role(spec.key)
            if existing is not None:
                run.roles[existing.id] = existing
                run.state.roles[spec.key] = existing.id
                run.result.reused["roles"] += 1
                log.debug("Reusing role %s for key %s", existing.id, spec.key)
                return

        colour = parse_color(spec.color) if spec.color else None
        if spec.color and colour is None:
            log.warning("Role %s has unrecognised colour %r; using default", spec.key, spec.color)
        role = await self.rate_limiter.execute(
            run.guild.create_role,
            name=spec.name,
            colour=colour or discord.Colour.default(),
            hoist=spec.hoist,
            mentionable=spec.mentionable,
            permissions=pack_permissions(spec.perm_pack),
            reason=AUDIT_REASON,
        )
        run.roles[role.id] = role
        run.state.roles[spec.key] = role.id
        run.result.created["roles"] += 1

    async def _position_roles(self, run: _BuildRun) -> StepOutcome:
        """Place blueprint roles on a descending ladder below the bot's top role."""
        step = "Role positions"
        ordered: list[int] = []
        for spec in run.blueprint.roles:
            role_id = run.state.roles.get(spec.key)
            if role_id and role_id not in ordered:
                ordered.append(role_id)

        try:
            position = run.guild.me.top_role.position - 1
            positions: Dict[discord.Role, int] = {}
            for role_id in ordered:
                role = run.roles.get(role_id) or run.guild.get_role(role_id)
                if role is None:
                    continue
                # Position 0 belongs to @everyone.
                if position < 1:
                    break
                positions[role] = position
                position -= 1

            if not positions:
                return StepOutcome(step, StepStatus.SUCCEEDED, "nothing to move")

            await self.rate_limiter.execute(run.guild.edit_role_positions, positions=positions, reason=AUDIT_REASON)
        except Exception as e:
            log.warning("Role positioning failed in guild %s: %s", run.guild.id, e)
            return StepOutcome(step, StepStatus.IGNORED_FAILURE, str(e) or type(e).__name__)
        return StepOutcome(step, StepStatus.SUCCEEDED, f"{len(positions)} roles ordered")

    # Categories and channels

    def _resolve_overwrites(self, run: _BuildRun, spec: Union[CategorySpec, ChannelSpec]) -> dict:
        everyone = run.guild.default_role
        locator = KeyLocator(run.guild, run.state)
        overwrites = {}
        for override in spec.overrides:
            record = resolve_override(override, locator.role_id, everyone.id)
            if record is None:
                log.debug("Skipping unresolved override on %s", spec.key)
                continue
            if record.everyone:
                target = everyone
            else:
                target = (
                    run.roles.get(record.target_id)
                    or run.guild.get_role(record.target_id)
                    or discord.Object(id=record.target_id, type=discord.Role)
                )
            overwrites[target] = record.to_overwrite()
        return overwrites

    async def _create_category(self, run: _BuildRun, spec: CategorySpec) -> None:
        category = None
        if run.first_use("categories", spec.key):
            category = run.existing.category(spec.key)

        if category is not None:
            run.result.reused["categories"] += 1
        else:
            category = await self.rate_limiter.execute(
                run.guild.create_category,
                spec.name,
                overwrites=self._resolve_overwrites(run, spec),
                reason=AUDIT_REASON,
            )
            run.result.created["categories"] += 1
        run.state.categories[spec.key] = category.id

        for channel_spec in spec.channels:
            await self._create_channel(run, category, channel_spec)

    async def _create_channel(
        self,
        run: _BuildRun,
        category: discord.CategoryChannel,
        spec: ChannelSpec,
    ) -> None:
        channel = None
        if run.first_use("channels", spec.key):
            channel = run.existing.channel(spec.key)

        if channel is not None:
            run.result.reused["channels"] += 1
        else:
            channel = await self._create_remote_channel(run, category, spec)
            run.result.created["channels"] += 1

        run.channels[channel.id] = channel
        run.state.channels[spec.key] = channel.id

    async def _create_remote_channel(self, run: _BuildRun, category: discord.CategoryChannel, spec: ChannelSpec):
        options = {}
        if spec.overrides:
            options["overwrites"] = self._resolve_overwrites(run, spec)
        if spec.kind is ChannelKind.VOICE:
            # Voice channels keep their display name.
            return await self.rate_limiter.execute(
                run.guild.create_voice_channel,
                spec.name.strip(),
                category=category,
                reason=AUDIT_REASON,
                **options,
            )

        if spec.topic:
            options["topic"] = spec.topic
        if spec.slowmode:
            options["slowmode_delay"] = min(max(0, spec.slowmode), MAX_SLOWMODE_SECONDS)
        return await self.rate_limiter.execute(
            run.guild.create_text_channel,
            normalize_channel_name(spec.name),
            category=category,
            reason=AUDIT_REASON,
            **options,
        )

    # Messages

    async def _resolve_message_channel(self, run: _BuildRun, key: str):
        channel_id = run.state.channels.get(key)
        if not channel_id:
            return None
        channel = run.channels.get(channel_id) or run.guild.get_channel(channel_id)
        if channel is not None:
            return channel
        try:
            return await self.rate_limiter.execute(run.guild.fetch_channel, channel_id)
        except discord.HTTPException as e:
            log.debug(f"Channel {channel_id} for key {key} is unreachable: {e}")
            return None

    async def _post_message(self, run: _BuildRun, spec: MessageSpec) -> None:
        channel = await self._resolve_message_channel(run, spec.channel_key)
        if channel is None or not is_message_capable(channel):
            run.result.messages_skipped += 1
            log.debug("Skipping message for channel key %s", spec.channel_key)
            return

        if spec.kind is MessageKind.EMBED:
            embed = discord.Embed(
                title=(spec.title or "Message")[:MAX_EMBED_TITLE],
                description=spec.description[:MAX_EMBED_DESCRIPTION],
            )
            await self.rate_limiter.execute(channel.send, embed=embed)
        else:
            await self.rate_limiter.execute(channel.send, content=spec.content)
        run.result.messages_sent += 1
