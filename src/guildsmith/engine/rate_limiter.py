from __future__ import annotations

import asyncio
import logging

import discord

log = logging.getLogger("guildsmith.rate_limiter")


class RateLimiter:
    """Serializes Discord API calls and retries 429 responses.

    Every other error propagates to the caller unchanged.
    """

    def __init__(self, max_retries: int = 3, default_retry_after: float = 1.0) -> None:
        self.max_retries = max(0, int(max_retries))
        self.default_retry_after = default_retry_after
        self._lock = asyncio.Lock()

    async def execute(self, coro, *args, **kwargs):
        """Execute a coroutine function with rate limit handling."""
        attempt = 0
        while True:
            try:
                async with self._lock:
                    return await coro(*args, **kwargs)
            except discord.HTTPException as e:
                if e.status != 429 or attempt >= self.max_retries:
                    raise
                attempt += 1
                retry_after = self._retry_after(e)
                log.warning("Rate limited, waiting %.2fs (attempt %d/%d)", retry_after, attempt, self.max_retries)
                await asyncio.sleep(retry_after)

    def _retry_after(self, error: discord.HTTPException) -> float:
        headers = getattr(getattr(error, "response", None), "headers", None) or {}
        try:
            return float(headers.get("Retry-After", self.default_retry_after))
        except (TypeError, ValueError):
            return self.default_retry_after
