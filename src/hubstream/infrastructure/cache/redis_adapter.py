"""Redis adapter - async Redis via redis.asyncio."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Awaitable, Callable, TypeVar

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

log = structlog.get_logger(__name__)

T = TypeVar("T")


class RedisAdapter:
    """Shared cache for several pipeline processes.

    Values are JSON text (same encoding as ``DiskcacheAdapter``).  Once
    connected, Redis failures are logged and degrade to a miss / no-op;
    only the initial PING on open is allowed to raise.

    Args:
        url: Redis URL (e.g. ``redis://localhost:6379/0``).
        ttl_seconds: TTL for ``set()`` calls without an explicit one.
        max_concurrent: Max Redis commands in flight.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        ttl_seconds: int = 3600,
        max_concurrent: int = 50,
    ) -> None:
        self.url = url
        self.default_ttl = ttl_seconds
        self._client: Redis | None = None
        self._semaphore = asyncio.Semaphore(max_concurrent)

    async def __aenter__(self) -> RedisAdapter:
        if self._client is None:
            self._client = Redis.from_url(self.url, encoding="utf-8", decode_responses=True)
            try:
                await self._client.ping()
            except RedisError as e:
                log.error("redis_connection_failed", url=self.url, error=str(e))
                raise
            log.info("redis_connected", url=self.url)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            log.info("redis_closed")

    def _require_open(self) -> Redis:
        if self._client is None:
            raise RuntimeError("Redis not initialized. Use 'async with cache:'")
        return self._client

    async def _guarded(
        self, op: str, key: str, call: Callable[[], Awaitable[T]], default: T
    ) -> T:
        async with self._semaphore:
            try:
                return await call()
            except RedisError as e:
                log.error("redis_error", op=op, key=key, error=str(e))
                return default

    # --- CachePort implementation ---
    async def get(self, key: str) -> Any | None:
        client = self._require_open()
        raw = await self._guarded("get", key, lambda: client.get(key), None)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            log.warning("redis_corrupt_value", key=key)
            return None

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        client = self._require_open()
        expire = ttl if ttl is not None else self.default_ttl
        try:
            packed = json.dumps(value)
        except (TypeError, ValueError) as e:
            log.error("json_serialize_error", key=key, error=str(e))
            return
        await self._guarded("set", key, lambda: client.setex(key, expire, packed), None)
