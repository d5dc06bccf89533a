"""
Forge Cog

Slash commands that build a server from a blueprint and apply edits to it.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import discord
from discord import app_commands
from discord.ext import commands

from ..blueprint import Blueprint
from ..constants import FAILURE_GLYPH
from ..engine.actions import EditAction
from ..engine.reporting import format_summary, send_safe_followup
from ..engine.text_commands import parse_edit_command
from ..errors import GuildsmithError
from ..templates import list_templates, load_template

log = logging.getLogger("guildsmith.cogs.forge")


class ForgeCog(commands.Cog):
    """Blueprint build and edit commands."""

    def __init__(self, bot: commands.Bot) -> None:
        self.bot = bot

    async def _resolve_blueprint(self, template: Optional[str], prompt: Optional[str]) -> Blueprint:
        settings = self.bot.settings
        if prompt and prompt.strip():
            return await self.bot.generator.generate_blueprint(prompt.strip())
        return load_template(template or settings.default_template, settings.templates_dir)

    @app_commands.command(name="build", description="Build roles, categories and channels from a blueprint")
    @app_commands.describe(
        template="Template id to build (defaults to the configured template)",
        prompt="Describe the server to generate a blueprint instead of using a template",
    )
    @app_commands.guild_only()
    @app_commands.default_permissions(administrator=True)
    @app_commands.checks.has_permissions(administrator=True)
    async def build(
        self,
        interaction: discord.Interaction,
        template: Optional[str] = None,
        prompt: Optional[str] = None,
    ) -> None:
        guild = interaction.guild
        await interaction.response.defer(ephemeral=True, thinking=True)

        try:
            blueprint = await self._resolve_blueprint(template, prompt)
            await interaction.followup.send(f"🏗️ Building **{blueprint.name}**...", ephemeral=True)
            result = await self.bot.builder.build(guild, blueprint)
        except GuildsmithError as e:
            log.warning("Build failed in guild %s: %s", guild.id, e)
            await send_safe_followup(interaction, f"{FAILURE_GLYPH} Build failed: {e}")
            return

        lines = result.summary_lines()
        await send_safe_followup(interaction, format_summary(lines), full_report="\n".join(lines))

    @build.autocomplete("template")
    async def _template_autocomplete(
        self, interaction: discord.Interaction, current: str
    ) -> List[app_commands.Choice[str]]:
        names = list_templates(self.bot.settings.templates_dir)
        current = current.lower()
        return [app_commands.Choice(name=n, value=n) for n in names if current in n.lower()][:25]

    @app_commands.command(name="edit", description="Edit roles and channels by name")
    @app_commands.describe(
        command='e.g. "rename role Helper to Support; lock channel announcements"',
        ai="Interpret the request with the text-generation service",
    )
    @app_commands.guild_only()
    @app_commands.default_permissions(administrator=True)
    @app_commands.checks.has_permissions(administrator=True)
    async def edit(self, interaction: discord.Interaction, command: str, ai: bool = False) -> None:
        guild = interaction.guild
        await interaction.response.defer(ephemeral=True, thinking=True)

        try:
            actions: List[EditAction]
            if ai:
                actions = await self.bot.generator.generate_actions(command)
            else:
                actions = parse_edit_command(command)
        except GuildsmithError as e:
            await send_safe_followup(interaction, f"{FAILURE_GLYPH} Edit failed: {e}")
            return

        if not actions:
            await send_safe_followup(interaction, f"{FAILURE_GLYPH} No edits were recognised in that request.")
            return

        outcomes = await self.bot.editor.apply_all(guild, actions)
        lines = [str(o) for o in outcomes]
        await send_safe_followup(interaction, format_summary(lines), full_report="\n".join(lines))
