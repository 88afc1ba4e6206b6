"""Tests for StageCache namespacing and key derivation."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from hubstream.infrastructure.cache.stage_cache import (
    CacheStage,
    StageCache,
    normalize_title_key,
    normalize_url_key,
)


class TestKeys:
    def test_title_key_is_slugged(self) -> None:
        assert normalize_title_key("Spider-Man: No Way Home", 2021) == (
            "spider_man_no_way_home_2021"
        )

    def test_title_key_without_year(self) -> None:
        assert normalize_title_key("Dune", None) == "dune_0"

    def test_url_key_lowercases_host_only(self) -> None:
        assert normalize_url_key(" HTTPS://Cloud.TEST/Drive/AbC ") == (
            "https://cloud.test/Drive/AbC"
        )

    def test_stages_do_not_collide(self) -> None:
        assert StageCache.key(CacheStage.SEARCH, "x") != StageCache.key(
            CacheStage.REDIRECT, "x"
        )


class TestStageCache:
    @pytest.mark.asyncio()
    async def test_set_uses_stage_ttl(self, stage_cache, memory_cache) -> None:
        await stage_cache.set(CacheStage.REDIRECT, "k", "https://dest.test")
        key = StageCache.key(CacheStage.REDIRECT, "k")
        assert memory_cache.data[key] == "https://dest.test"
        assert memory_cache.ttls[key] == 259_200

    @pytest.mark.asyncio()
    async def test_get_roundtrip(self, stage_cache) -> None:
        await stage_cache.set(CacheStage.SEARCH, "dune_2021", "https://site.test/dune")
        assert await stage_cache.get(CacheStage.SEARCH, "dune_2021") == (
            "https://site.test/dune"
        )
        assert await stage_cache.get(CacheStage.FINAL_LINKS, "dune_2021") is None

    @pytest.mark.asyncio()
    async def test_disabled_never_reads_or_writes(self, mock_cache: AsyncMock) -> None:
        cache = StageCache(mock_cache, {}, enabled=False)
        await cache.set(CacheStage.SEARCH, "k", "v")
        assert await cache.get(CacheStage.SEARCH, "k") is None
        mock_cache.get.assert_not_awaited()
        mock_cache.set.assert_not_awaited()

    @pytest.mark.asyncio()
    async def test_backend_errors_become_misses(self, mock_cache: AsyncMock) -> None:
        mock_cache.get.side_effect = RuntimeError("db locked")
        mock_cache.set.side_effect = RuntimeError("db locked")
        cache = StageCache(mock_cache, {CacheStage.SEARCH: 10})
        assert await cache.get(CacheStage.SEARCH, "k") is None
        await cache.set(CacheStage.SEARCH, "k", "v")
