"""Tests for BatchResolver and stream descriptor formatting."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from hubstream.domain.entities import (
    EntryMeta,
    HopKind,
    LinkSource,
    ResolvedLink,
    SourceEntry,
)
from hubstream.infrastructure.site.batch_resolver import BatchResolver
from hubstream.infrastructure.site.streams import to_stream_descriptor


def _entry(i: int, height: int = 1080) -> SourceEntry:
    return SourceEntry(
        title=f"Movie.{i}.mkv",
        redirect_href=f"https://r.test/?id={i}",
        hop_kind=HopKind.CLOUD,
        size_bytes=1024**3,
        height_px=height,
    )


def _link(entry: SourceEntry, source: LinkSource = LinkSource.FSL) -> ResolvedLink:
    return ResolvedLink(
        source=source,
        url=f"https://fsl.test/{entry.title}",
        meta=entry.meta,
    )


class TestStreamDescriptor:
    def test_format(self) -> None:
        entry = _entry(1)
        desc = to_stream_descriptor(
            ResolvedLink(
                source=LinkSource.PIXEL_SERVER,
                url="https://px.test/api/file/abc",
                meta=EntryMeta(title="Movie.2023.mkv", size_bytes=int(2.1 * 1024**3)),
            ),
            entry,
            source_name="4KHDHub",
        )
        assert desc.name == "4KHDHub - PixelServer 1080p"
        assert desc.title == "Movie.2023.mkv\n2.1 GB"
        assert desc.url == "https://px.test/api/file/abc"
        assert desc.quality_label == "1080p"
        assert desc.binge_group_key == "4khdhub-PixelServer"

    def test_unknown_quality(self) -> None:
        entry = _entry(1, height=0)
        desc = to_stream_descriptor(_link(entry), entry, source_name="4KHDHub")
        assert desc.name == "4KHDHub - FSL"
        assert desc.quality_label is None


class TestBatchResolver:
    @pytest.mark.asyncio()
    async def test_per_entry_failure_is_isolated(self, fake_fetcher, dialect) -> None:
        entries = [_entry(i) for i in range(4)]

        async def extract(entry: SourceEntry) -> list[ResolvedLink]:
            if entry.title == "Movie.2.mkv":
                raise RuntimeError("boom")
            return [_link(entry)]

        extractor = AsyncMock()
        extractor.extract = AsyncMock(side_effect=extract)
        resolver = BatchResolver(fake_fetcher, extractor, dialect=dialect)

        streams = await resolver.resolve_entries(entries)

        assert sorted(s.url for s in streams) == [
            "https://fsl.test/Movie.0.mkv",
            "https://fsl.test/Movie.1.mkv",
            "https://fsl.test/Movie.3.mkv",
        ]

    @pytest.mark.asyncio()
    async def test_concurrency_cap(self, fake_fetcher, dialect) -> None:
        in_flight = 0
        peak = 0

        async def extract(entry: SourceEntry) -> list[ResolvedLink]:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.05)
            in_flight -= 1
            return [_link(entry)]

        extractor = AsyncMock()
        extractor.extract = AsyncMock(side_effect=extract)
        resolver = BatchResolver(fake_fetcher, extractor, dialect=dialect, max_concurrent=5)

        streams = await resolver.resolve_entries([_entry(i) for i in range(13)])

        assert len(streams) == 13
        assert peak == 5

    @pytest.mark.asyncio()
    async def test_resolve_fetches_page(self, fake_fetcher, dialect) -> None:
        page = "https://site.test/movie/"
        fake_fetcher.pages[page] = (
            '<div class="download-item"><div class="file-title">A.720p.mkv</div>'
            '<a href="https://r.test/?id=1">HubCloud</a></div>'
        )
        extractor = AsyncMock()
        extractor.extract = AsyncMock(side_effect=lambda e: [_link(e)])
        resolver = BatchResolver(fake_fetcher, extractor, dialect=dialect)

        streams = await resolver.resolve(page)

        assert len(streams) == 1
        assert streams[0].quality_label == "720p"

    @pytest.mark.asyncio()
    async def test_unreachable_page(self, fake_fetcher, dialect) -> None:
        resolver = BatchResolver(fake_fetcher, AsyncMock(), dialect=dialect)
        assert await resolver.resolve("https://site.test/gone/") == []
