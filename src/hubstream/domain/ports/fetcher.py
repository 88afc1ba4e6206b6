"""Port for fetching HTML pages."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class PageFetcherPort(Protocol):
    """Resilient GET returning the response body.

    Implementations retry network failures internally and return None once
    retries are exhausted; they never raise past this boundary.
    """

    async def fetch_text(
        self, url: str, *, headers: dict[str, str] | None = None
    ) -> str | None: ...
