"""Stream resolution use case.

Metadata ID -> title/year -> content page -> entries
-> concurrent hop walking -> StreamDescriptor list.
"""

from __future__ import annotations

from typing import Protocol

import structlog

from hubstream.domain.entities.links import (
    EpisodeFilter,
    StreamDescriptor,
    StreamRequest,
)
from hubstream.domain.exceptions import UpstreamEmpty
from hubstream.domain.ports.metadata import MetadataPort

log = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Protocols - what this use case needs from its collaborators.
# ---------------------------------------------------------------------------


class _PageMatcher(Protocol):
    async def find_page(
        self, title: str, year: int, is_series: bool
    ) -> str | None: ...


class _BatchResolver(Protocol):
    async def resolve(
        self, page_url: str, episode: EpisodeFilter | None = None
    ) -> list[StreamDescriptor]: ...


class ResolveStreamsUseCase:
    """Top-level entry point of the pipeline.

    ``execute`` never raises: every failure degrades to an empty (or
    partial) list.
    """

    def __init__(
        self,
        *,
        metadata: MetadataPort,
        matcher: _PageMatcher,
        resolver: _BatchResolver,
    ) -> None:
        self._metadata = metadata
        self._matcher = matcher
        self._resolver = resolver

    async def _run(self, request: StreamRequest) -> list[StreamDescriptor]:
        info = await self._metadata.get_title_and_year(
            request.content_id, request.media_kind
        )
        if info is None or not info.title:
            raise UpstreamEmpty(f"no metadata for {request.content_id}")

        log.info(
            "stream_search",
            content_id=request.content_id,
            title=info.title,
            year=info.year,
            kind=request.media_kind,
        )
        page_url = await self._matcher.find_page(info.title, info.year, request.is_series)
        if not page_url:
            raise UpstreamEmpty(f"no page for {info.title!r} ({info.year})")

        episode: EpisodeFilter | None = None
        if request.is_series and request.season and request.episode:
            episode = EpisodeFilter(season=request.season, episode=request.episode)

        return await self._resolver.resolve(page_url, episode)

    async def execute(self, request: StreamRequest) -> list[StreamDescriptor]:
        try:
            streams = await self._run(request)
        except UpstreamEmpty as exc:
            log.info("stream_upstream_empty", content_id=request.content_id, reason=str(exc))
            return []
        except Exception:  # noqa: BLE001
            log.error(
                "stream_resolution_failed",
                content_id=request.content_id,
                exc_info=True,
            )
            return []

        log.info(
            "stream_resolution_complete",
            content_id=request.content_id,
            streams=len(streams),
        )
        return streams
