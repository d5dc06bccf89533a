from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar

import aiosqlite

log = logging.getLogger("guildsmith.services")

T = TypeVar("T")


class BaseService(ABC, Generic[T]):
    """Base class for aiosqlite-backed stores.

    Subclasses create their tables in ``_create_tables`` and describe a
    single-row lookup with ``_get_query`` and ``_from_row``. ``get`` caches
    decoded rows for ``cache_ttl`` seconds; writers call ``invalidate``.
    """

    def __init__(self, sqlite_path: str, cache_ttl: int = 300) -> None:
        self._path = sqlite_path
        self._cache_ttl = cache_ttl
        self._cache: Dict[Tuple[Any, ...], Tuple[float, T]] = {}
        self._ready = False

    async def init(self) -> None:
        async with aiosqlite.connect(self._path) as db:
            await self._create_tables(db)
            await db.commit()
        self._ready = True
        log.info(f"{self.__class__.__name__} initialized at {self._path}")

    async def _ensure_ready(self) -> None:
        if not self._ready:
            await self.init()

    @abstractmethod
    async def _create_tables(self, db: aiosqlite.Connection) -> None:
        ...

    @abstractmethod
    def _from_row(self, row: aiosqlite.Row) -> T:
        ...

    @property
    @abstractmethod
    def _get_query(self) -> str:
        ...

    async def get(self, *params: Any) -> Optional[T]:
        """Fetch and decode one row by the subclass's lookup query."""
        await self._ensure_ready()
        cached = self._cache.get(params)
        if cached is not None and time.monotonic() - cached[0] < self._cache_ttl:
            return cached[1]

        async with aiosqlite.connect(self._path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(self._get_query, params) as cur:
                row = await cur.fetchone()
        if row is None:
            return None

        value = self._from_row(row)
        if self._cache_ttl > 0:
            self._cache[params] = (time.monotonic(), value)
        return value

    def invalidate(self, *params: Any) -> None:
        if params:
            self._cache.pop(params, None)
        else:
            self._cache.clear()
