from __future__ import annotations

import logging

import discord
from discord import app_commands
from discord.ext import commands

from .constants import FAILURE_GLYPH
from .errors import GuildsmithError

log = logging.getLogger("guildsmith.error_handlers")


async def _respond(interaction: discord.Interaction, content: str) -> None:
    try:
        if interaction.response.is_done():
            await interaction.followup.send(content, ephemeral=True)
        else:
            await interaction.response.send_message(content, ephemeral=True)
    except discord.HTTPException as e:
        log.warning("Could not deliver error reply: %s", e)


async def on_app_command_error(interaction: discord.Interaction, error: app_commands.AppCommandError) -> None:
    """Tree-wide handler for slash command failures."""
    if isinstance(error, app_commands.MissingPermissions):
        await _respond(interaction, f"{FAILURE_GLYPH} You need the Administrator permission to use this command.")
        return

    if isinstance(error, app_commands.NoPrivateMessage):
        await _respond(interaction, f"{FAILURE_GLYPH} This command can only be used in a server.")
        return

    if isinstance(error, app_commands.BotMissingPermissions):
        missing = ", ".join(error.missing_permissions)
        await _respond(interaction, f"{FAILURE_GLYPH} I am missing permissions: {missing}")
        return

    original = getattr(error, "original", error)
    if isinstance(original, GuildsmithError):
        await _respond(interaction, f"{FAILURE_GLYPH} {original}")
        return

    command = interaction.command.qualified_name if interaction.command else "?"
    log.error("Unexpected error in /%s", command, exc_info=original)
    await _respond(interaction, f"{FAILURE_GLYPH} Something went wrong. Check the bot logs for details.")


async def setup_error_handlers(bot: commands.Bot) -> None:
    bot.tree.on_error = on_app_command_error
