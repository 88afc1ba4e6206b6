"""No-op cache used when caching is disabled."""

from __future__ import annotations

from typing import Any


class NullCache:
    """CachePort implementation that stores nothing; every get misses."""

    async def __aenter__(self) -> NullCache:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        return None

    async def get(self, key: str) -> Any | None:
        return None

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        return None
