"""Key-value cache the pipeline stages memoize into."""

from __future__ import annotations

from typing import Any, Protocol


class CachePort(Protocol):
    """Async get/set with per-entry TTL.

    Entries only ever leave through expiry, so there is no delete.
    Backends open and close through ``async with``.
    """

    async def get(self, key: str) -> Any:
        """Stored value, or None when absent or expired."""
        ...

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None: ...

    async def aclose(self) -> None: ...

    async def __aenter__(self) -> CachePort: ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None: ...
