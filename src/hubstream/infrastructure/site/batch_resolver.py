"""Resolve every entry of a content page into stream descriptors."""

from __future__ import annotations

import structlog

from hubstream.domain.entities.links import EpisodeFilter, SourceEntry, StreamDescriptor
from hubstream.domain.ports.fetcher import PageFetcherPort
from hubstream.infrastructure.concurrency import BoundedPool
from hubstream.infrastructure.config.schema import SiteDialect
from hubstream.infrastructure.site.entries import parse_source_entries
from hubstream.infrastructure.site.link_extractor import LinkExtractor
from hubstream.infrastructure.site.streams import to_stream_descriptor

log = structlog.get_logger(__name__)


class BatchResolver:
    """Fan entries out through the link extractor under a concurrency cap.

    A failing entry contributes nothing and never cancels its siblings.
    Output is in completion order.
    """

    def __init__(
        self,
        fetcher: PageFetcherPort,
        extractor: LinkExtractor,
        *,
        dialect: SiteDialect,
        max_concurrent: int = 5,
    ) -> None:
        self._fetcher = fetcher
        self._extractor = extractor
        self._dialect = dialect
        self._max_concurrent = max_concurrent

    async def _resolve_entry(self, entry: SourceEntry) -> list[StreamDescriptor]:
        try:
            links = await self._extractor.extract(entry)
        except Exception:  # noqa: BLE001
            log.warning("entry_resolve_error", title=entry.title, exc_info=True)
            return []
        return [
            to_stream_descriptor(link, entry, source_name=self._dialect.source_name)
            for link in links
        ]

    async def resolve_entries(
        self, entries: list[SourceEntry]
    ) -> list[StreamDescriptor]:
        pool = BoundedPool(self._max_concurrent)
        results: list[StreamDescriptor] = []
        async for descriptors in pool.map_as_completed(entries, self._resolve_entry):
            results.extend(descriptors)
        log.info(
            "batch_resolved",
            entries=len(entries),
            streams=len(results),
            peak_in_flight=pool.peak,
        )
        return results

    async def resolve(
        self, page_url: str, episode: EpisodeFilter | None = None
    ) -> list[StreamDescriptor]:
        """Fetch *page_url* and resolve its (optionally filtered) entries."""
        html = await self._fetcher.fetch_text(page_url)
        if not html:
            return []
        entries = parse_source_entries(html, self._dialect, episode)
        log.info(
            "entries_found",
            url=page_url,
            count=len(entries),
            season=episode.season if episode else None,
            episode=episode.episode if episode else None,
        )
        return await self.resolve_entries(entries)
