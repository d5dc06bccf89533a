from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict

import aiosqlite

from ..errors import StateStoreError
from .base import BaseService

log = logging.getLogger("guildsmith.resource_state_store")

RESOURCE_KINDS = ("roles", "categories", "channels")


@dataclass
class ResourceState:
    """Logical key -> remote id mappings for one guild."""
    roles: Dict[str, int] = field(default_factory=dict)
    categories: Dict[str, int] = field(default_factory=dict)
    channels: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        return {kind: dict(getattr(self, kind)) for kind in RESOURCE_KINDS}

    @classmethod
    def from_dict(cls, data: Any) -> "ResourceState":
        if not isinstance(data, dict):
            raise StateStoreError("state document must be an object")
        mappings = {}
        for kind in RESOURCE_KINDS:
            raw = data.get(kind) or {}
            if not isinstance(raw, dict):
                raise StateStoreError(f"state mapping {kind!r} must be an object")
            try:
                mappings[kind] = {str(k): int(v) for k, v in raw.items()}
            except (TypeError, ValueError) as e:
                raise StateStoreError(f"state mapping {kind!r} holds a non-numeric id") from e
        return cls(**mappings)

    def copy(self) -> "ResourceState":
        return ResourceState.from_dict(self.to_dict())

    def is_empty(self) -> bool:
        return not (self.roles or self.categories or self.channels)


class ResourceStateStore(BaseService[ResourceState]):
    """SQLite-backed resource-key state, one JSON document per guild.

    Every save replaces the guild's whole document in a single statement, so
    a stored document is never partially written. Unreadable documents raise
    StateStoreError and are left untouched.
    """

    def __init__(self, sqlite_path: str, cache_ttl: int = 300) -> None:
        super().__init__(sqlite_path, cache_ttl)
        self._locks: Dict[int, asyncio.Lock] = {}

    async def _create_tables(self, db: aiosqlite.Connection) -> None:
        await db.execute(
            """
            CREATE TABLE IF NOT EXISTS resource_state (
                guild_id INTEGER PRIMARY KEY,
                document TEXT NOT NULL,
                updated_at INTEGER NOT NULL DEFAULT (strftime('%s','now'))
            )
            """
        )

    def _from_row(self, row: aiosqlite.Row) -> ResourceState:
        try:
            data = json.loads(row["document"])
        except json.JSONDecodeError as e:
            raise StateStoreError(f"Corrupt state document for guild {row['guild_id']}") from e
        return ResourceState.from_dict(data)

    @property
    def _get_query(self) -> str:
        return "SELECT guild_id, document FROM resource_state WHERE guild_id = ?"

    def lock(self, guild_id: int) -> asyncio.Lock:
        """Advisory per-guild lock held around builds and edit batches."""
        lock = self._locks.get(int(guild_id))
        if lock is None:
            lock = self._locks[int(guild_id)] = asyncio.Lock()
        return lock

    async def load(self, guild_id: int) -> ResourceState:
        try:
            state = await self.get(int(guild_id))
        except aiosqlite.Error as e:
            raise StateStoreError(f"Failed to read state for guild {guild_id}: {e}") from e
        # Callers mutate what they load; the cached copy stays untouched.
        return state.copy() if state is not None else ResourceState()

    async def save(self, guild_id: int, state: ResourceState) -> None:
        await self._ensure_ready()
        document = json.dumps(state.to_dict(), sort_keys=True)
        try:
            async with aiosqlite.connect(self._path) as db:
                await db.execute(
                    """
                    INSERT INTO resource_state (guild_id, document, updated_at)
                    VALUES (?, ?, strftime('%s','now'))
                    ON CONFLICT(guild_id) DO UPDATE SET
                        document=excluded.document,
                        updated_at=excluded.updated_at
                    """,
                    (int(guild_id), document),
                )
                await db.commit()
        except aiosqlite.Error as e:
            raise StateStoreError(f"Failed to write state for guild {guild_id}: {e}") from e
        self.invalidate(int(guild_id))
        log.debug(
            f"Saved state for guild {guild_id} "
            f"({len(state.roles)} roles, {len(state.categories)} categories, {len(state.channels)} channels)"
        )

    async def dump(self) -> Dict[str, Dict[str, Dict[str, int]]]:
        """All guild states as one document keyed by guild id."""
        await self._ensure_ready()
        async with aiosqlite.connect(self._path) as db:
            async with db.execute("SELECT guild_id, document FROM resource_state ORDER BY guild_id") as cur:
                rows = await cur.fetchall()
        out = {}
        for guild_id, document in rows:
            try:
                out[str(guild_id)] = ResourceState.from_dict(json.loads(document)).to_dict()
            except json.JSONDecodeError as e:
                raise StateStoreError(f"Corrupt state document for guild {guild_id}") from e
        return out
