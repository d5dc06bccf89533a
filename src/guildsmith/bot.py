from __future__ import annotations

import asyncio
import logging

import discord
from discord.ext import commands

from .config import Settings
from .database import initialize_database
from .engine.builder import BlueprintBuilder
from .engine.editor import EditEngine
from .engine.rate_limiter import RateLimiter
from .error_handlers import setup_error_handlers
from .generation.client import TextGenerationClient
from .services.resource_state_store import ResourceStateStore

log = logging.getLogger("guildsmith.bot")


class _CommandSyncManager:
    def __init__(self, bot: "GuildsmithBot") -> None:
        self.bot = bot
        self._lock = asyncio.Lock()

    async def sync_startup(self) -> None:
        if self.bot.settings.sync_guild_id:
            await self.sync_guild(self.bot.settings.sync_guild_id)
        else:
            await self.sync_global()

    async def sync_global(self) -> None:
        async with self._lock:
            synced = await self.bot.tree.sync()
            log.info("Commands synced globally: %d", len(synced))

    async def sync_guild(self, guild_id: int) -> None:
        async with self._lock:
            guild = discord.Object(id=guild_id)
            self.bot.tree.copy_global_to(guild=guild)
            synced = await self.bot.tree.sync(guild=guild)
            log.info("Commands synced to guild %d: %d", guild_id, len(synced))


class GuildsmithBot(commands.Bot):
    def __init__(self, settings: Settings) -> None:
        intents = discord.Intents.default()
        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            allowed_mentions=discord.AllowedMentions(everyone=False, roles=False, users=True),
            help_command=None,
        )

        self.settings = settings
        self.rate_limiter = RateLimiter()
        self.state_store = ResourceStateStore(settings.sqlite_path)
        self.builder = BlueprintBuilder(
            self.state_store,
            self.rate_limiter,
            reuse_existing=settings.build_reuse_existing,
        )
        self.editor = EditEngine(self.rate_limiter, self.state_store)
        self.generator = TextGenerationClient(
            settings.ollama_url,
            settings.ollama_model,
            timeout=settings.generation_timeout_seconds,
        )
        self._sync_mgr = _CommandSyncManager(self)

    async def setup_hook(self) -> None:
        await initialize_database(self.settings.sqlite_path, [self.state_store])
        await setup_error_handlers(self)

        from .cogs.forge import ForgeCog

        await self.add_cog(ForgeCog(self))
        log.info("Loaded cog: ForgeCog")
        await self._sync_mgr.sync_startup()

    async def on_ready(self) -> None:
        log.info("Logged in as %s (%s) in %d guilds", self.user, getattr(self.user, "id", "?"), len(self.guilds))

    async def close(self) -> None:
        try:
            await self.generator.close()
        finally:
            await super().close()
