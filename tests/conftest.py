"""Shared test fixtures for the hubstream test suite."""

from __future__ import annotations

import base64
import codecs
import json
from typing import Any, Callable
from unittest.mock import AsyncMock

import pytest

from hubstream.domain.entities import EntryMeta, HopKind, SourceEntry
from hubstream.infrastructure.cache.stage_cache import CacheStage, StageCache
from hubstream.infrastructure.config.schema import ResolverConfig, SiteDialect

SITE = "https://site.test"

# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class MemoryCache:
    """Dict-backed CachePort (no TTL expiry)."""

    def __init__(self) -> None:
        self.data: dict[str, Any] = {}
        self.ttls: dict[str, int | None] = {}

    async def __aenter__(self) -> MemoryCache:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None

    async def get(self, key: str) -> Any:
        return self.data.get(key)

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        self.data[key] = value
        self.ttls[key] = ttl

    async def aclose(self) -> None:
        return None


class FakeFetcher:
    """PageFetcherPort returning canned HTML per URL and recording calls."""

    def __init__(self, pages: dict[str, str] | None = None) -> None:
        self.pages: dict[str, str] = dict(pages or {})
        self.calls: list[tuple[str, dict[str, str] | None]] = []

    async def fetch_text(
        self, url: str, *, headers: dict[str, str] | None = None
    ) -> str | None:
        self.calls.append((url, headers))
        return self.pages.get(url)

    def urls(self) -> list[str]:
        return [url for url, _ in self.calls]


def encode_redirect_token(destination: str) -> str:
    """Inverse of the site's decode chain (base64 -> rot13 -> base64 x2)."""

    def b64(value: str) -> str:
        return base64.b64encode(value.encode("latin-1")).decode("ascii")

    payload = json.dumps({"o": b64(destination)})
    return b64(b64(codecs.encode(b64(payload), "rot13")))


def redirect_page(destination: str) -> str:
    token = encode_redirect_token(destination)
    return (
        "<html><head><script>"
        f"s('o', '{token}', 180 * 1000);"
        "</script></head><body>Please wait...</body></html>"
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def dialect() -> SiteDialect:
    return SiteDialect(base_url=SITE)


@pytest.fixture()
def resolver_config() -> ResolverConfig:
    return ResolverConfig()


@pytest.fixture()
def memory_cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture()
def stage_cache(memory_cache: MemoryCache) -> StageCache:
    return StageCache(
        memory_cache,
        {
            CacheStage.SEARCH: 86_400,
            CacheStage.REDIRECT: 259_200,
            CacheStage.FINAL_LINKS: 3_600,
            CacheStage.METADATA: 86_400,
        },
    )


@pytest.fixture()
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture()
def make_redirect_page() -> Callable[[str], str]:
    return redirect_page


@pytest.fixture()
def make_token() -> Callable[[str], str]:
    return encode_redirect_token


@pytest.fixture()
def cloud_entry() -> SourceEntry:
    return SourceEntry(
        title="Movie.2023.1080p.WEB-DL.mkv",
        redirect_href="https://gadgets.test/?id=cloud",
        hop_kind=HopKind.CLOUD,
        size_bytes=int(2.1 * 1024**3),
        height_px=1080,
    )


@pytest.fixture()
def base_meta(cloud_entry: SourceEntry) -> EntryMeta:
    return cloud_entry.meta


@pytest.fixture()
def mock_cache() -> AsyncMock:
    """Mock CachePort."""
    cache = AsyncMock()
    cache.get = AsyncMock(return_value=None)
    cache.set = AsyncMock()
    cache.aclose = AsyncMock()
    return cache
