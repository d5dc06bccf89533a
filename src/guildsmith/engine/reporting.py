"""
Safe Message Reporting

Keeps command replies under Discord's 2000 character limit.
"""

from __future__ import annotations

import io
import logging
from typing import Iterable, Optional

import discord

from ..constants import SUMMARY_MAX_LENGTH

log = logging.getLogger("guildsmith.reporting")

TRUNCATION_MARKER = "… (truncated)"


def format_summary(lines: Iterable[str], max_length: int = SUMMARY_MAX_LENGTH) -> str:
    """Join summary lines, dropping trailing lines that would exceed max_length."""
    lines = [str(line) for line in lines]
    joined = "\n".join(lines)
    if len(joined) <= max_length:
        return joined
    kept: list[str] = []
    for line in lines:
        if len("\n".join(kept + [line, TRUNCATION_MARKER])) > max_length:
            break
        kept.append(line)
    if not kept:
        return truncate_message(joined, max_length)
    return "\n".join(kept + [TRUNCATION_MARKER])


def truncate_message(content: str, max_length: int = SUMMARY_MAX_LENGTH) -> str:
    """Truncate a message to fit within Discord's limits."""
    if len(content) <= max_length:
        return content
    return content[: max_length - len(TRUNCATION_MARKER) - 1] + "\n" + TRUNCATION_MARKER


async def send_safe_followup(
    interaction: discord.Interaction,
    content: str,
    full_report: Optional[str] = None,
    filename: str = "guildsmith_report.txt",
) -> Optional[discord.Message]:
    """Send an ephemeral followup, attaching the full report when it was cut."""
    content = truncate_message(content)
    try:
        if full_report and len(full_report) > len(content):
            file = discord.File(io.BytesIO(full_report.encode("utf-8")), filename=filename)
            return await interaction.followup.send(content=content, file=file, ephemeral=True)
        return await interaction.followup.send(content=content, ephemeral=True)
    except discord.NotFound:
        log.warning("Interaction expired before the report could be sent")
    except discord.HTTPException as e:
        log.error("Failed to send report: %s", e)
    return None
