"""Cache factory - builds the adapter selected by config."""

from __future__ import annotations

from typing import Literal

import structlog

from hubstream.domain.ports.cache import CachePort
from hubstream.infrastructure.cache.diskcache_adapter import DiskcacheAdapter
from hubstream.infrastructure.cache.null_adapter import NullCache
from hubstream.infrastructure.cache.redis_adapter import RedisAdapter

log = structlog.get_logger(__name__)

CacheBackend = Literal["diskcache", "redis"]


def create_cache(
    backend: CacheBackend = "diskcache",
    *,
    enabled: bool = True,
    # Diskcache-Config
    directory: str = "./.cache/hubstream",
    # Redis-Config
    redis_url: str = "redis://localhost:6379/0",
    # Shared Config
    ttl_seconds: int = 3600,
    max_concurrent: int = 10,
) -> CachePort:
    """Create the cache adapter for *backend*.

    Args:
        backend: "diskcache" (SQLite) or "redis".
        enabled: When False a NullCache is returned regardless of backend.
        directory: Diskcache path.
        redis_url: Redis connection string.
        ttl_seconds: Default TTL for both backends.
        max_concurrent: Semaphore limit (diskcache; Redis uses 50).

    Raises:
        ValueError: If `backend` is unknown.
    """
    if not enabled:
        log.info("cache_factory_create", backend="null")
        return NullCache()

    if backend == "diskcache":
        log.info(
            "cache_factory_create",
            backend=backend,
            directory=directory,
            ttl=ttl_seconds,
            max_concurrent=max_concurrent,
        )
        return DiskcacheAdapter(
            directory=directory,
            ttl_seconds=ttl_seconds,
            max_concurrent=max_concurrent,
        )
    elif backend == "redis":
        log.info(
            "cache_factory_create",
            backend=backend,
            url=redis_url,
            ttl=ttl_seconds,
            max_concurrent=50,
        )
        return RedisAdapter(
            url=redis_url,
            ttl_seconds=ttl_seconds,
            max_concurrent=50,
        )
    else:
        raise ValueError(
            f"Unknown cache backend: {backend!r}. Must be 'diskcache' or 'redis'."
        )
