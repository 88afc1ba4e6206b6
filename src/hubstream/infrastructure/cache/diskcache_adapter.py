"""Diskcache adapter - SQLite-backed cache, no daemon required."""

from __future__ import annotations

import asyncio
import json
import sqlite3
from pathlib import Path
from typing import Any, Callable, TypeVar

import structlog
from diskcache import Cache as DiskCache
from diskcache import Timeout as DiskTimeout

log = structlog.get_logger(__name__)

T = TypeVar("T")


class DiskcacheAdapter:
    """Async facade over the synchronous ``diskcache.Cache``.

    Values are stored as JSON text so a cached pipeline value reads back
    the same way from either backend (see ``RedisAdapter``).  Every disk
    call runs in a worker thread behind a semaphore; SQLite lock timeouts
    and I/O errors are logged and turned into a miss or a no-op.

    Args:
        directory: Cache directory, created on open.
        ttl_seconds: TTL for ``set()`` calls without an explicit one.
        max_concurrent: Max disk operations in flight.
    """

    def __init__(
        self,
        directory: str | Path = "./.cache/hubstream",
        ttl_seconds: int = 3600,
        max_concurrent: int = 10,
    ) -> None:
        self.directory = Path(directory)
        self.default_ttl = ttl_seconds
        self._cache: DiskCache | None = None
        self._semaphore = asyncio.Semaphore(max_concurrent)

    async def __aenter__(self) -> DiskcacheAdapter:
        if self._cache is None:
            self._cache = await asyncio.to_thread(DiskCache, str(self.directory))
            log.info("diskcache_opened", path=str(self.directory))
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._cache is not None:
            await asyncio.to_thread(self._cache.close)
            self._cache = None
            log.info("diskcache_closed", path=str(self.directory))

    def _require_open(self) -> DiskCache:
        if self._cache is None:
            raise RuntimeError(
                "Cache not initialized. Use 'async with cache:' or await cache.__aenter__()"
            )
        return self._cache

    async def _call(self, op: str, key: str, fn: Callable[[], T], default: T) -> T:
        async with self._semaphore:
            try:
                return await asyncio.to_thread(fn)
            except (DiskTimeout, sqlite3.Error, OSError) as e:
                log.error("diskcache_error", op=op, key=key, error=str(e))
                return default

    # --- CachePort implementation ---
    async def get(self, key: str) -> Any | None:
        cache = self._require_open()
        raw = await self._call("get", key, lambda: cache.get(key, default=None), None)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            log.warning("diskcache_corrupt_value", key=key)
            return None

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        cache = self._require_open()
        expire = ttl if ttl is not None else self.default_ttl
        try:
            packed = json.dumps(value)
        except (TypeError, ValueError) as e:
            log.error("json_serialize_error", key=key, error=str(e))
            return
        await self._call("set", key, lambda: cache.set(key, packed, expire=expire), False)
        log.debug("cache_set", key=key, ttl=expire)
