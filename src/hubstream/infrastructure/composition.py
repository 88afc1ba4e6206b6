"""Composition root: wires config into a ready-to-use pipeline."""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

import httpx
import structlog

from hubstream.application.use_cases.resolve_streams import ResolveStreamsUseCase
from hubstream.domain.entities.links import MediaKind, StreamDescriptor, StreamRequest
from hubstream.domain.ports.cache import CachePort
from hubstream.infrastructure.cache.cache_factory import create_cache
from hubstream.infrastructure.cache.stage_cache import CacheStage, StageCache
from hubstream.infrastructure.config.load import load_config
from hubstream.infrastructure.config.schema import AppConfig, CacheConfig
from hubstream.infrastructure.http.fetcher import HttpFetcher, build_http_client
from hubstream.infrastructure.site import (
    BatchResolver,
    LinkExtractor,
    PageMatcher,
    RedirectDecoder,
)
from hubstream.infrastructure.tmdb.client import HttpxTmdbClient

log = structlog.get_logger(__name__)

_MEDIA_KIND_ALIASES: dict[str, MediaKind] = {
    "movie": "movie",
    "series": "series",
    "tv": "series",
}


def normalize_media_kind(value: str) -> MediaKind:
    """Map ``movie``/``series``/``tv`` onto a MediaKind.

    Raises:
        ValueError: for anything else.
    """
    try:
        return _MEDIA_KIND_ALIASES[value.strip().lower()]
    except KeyError:
        raise ValueError(f"unknown media kind: {value!r}") from None


def stage_ttls(cache: CacheConfig) -> dict[CacheStage, int]:
    return {
        CacheStage.SEARCH: cache.search_ttl_seconds,
        CacheStage.REDIRECT: cache.redirect_ttl_seconds,
        CacheStage.FINAL_LINKS: cache.final_links_ttl_seconds,
        CacheStage.METADATA: cache.metadata_ttl_seconds,
    }


@dataclass
class Pipeline:
    """Live pipeline components, valid inside :func:`build_pipeline`."""

    config: AppConfig
    cache: CachePort
    http_client: httpx.AsyncClient
    fetcher: HttpFetcher
    matcher: PageMatcher
    decoder: RedirectDecoder
    extractor: LinkExtractor
    resolver: BatchResolver
    use_case: ResolveStreamsUseCase


@asynccontextmanager
async def build_pipeline(config: AppConfig) -> AsyncIterator[Pipeline]:
    """Initialize and clean up all pipeline resources.

    Order matters:
        1. Cache (required by every stage)
        2. HTTP client + fetcher
        3. Site stages (matcher, decoder, extractor, batch resolver)
        4. Metadata client + use case
    """
    # ========== 1) Cache ==========
    cache = create_cache(
        backend=config.cache.backend,
        enabled=config.cache.enabled,
        directory=str(config.cache.directory),
        redis_url=config.cache.redis_url,
        ttl_seconds=config.cache.final_links_ttl_seconds,
        max_concurrent=config.cache.max_concurrent,
    )
    await cache.__aenter__()
    stage_cache = StageCache(
        cache, stage_ttls(config.cache), enabled=config.cache.enabled
    )
    log.info("cache_initialized", backend=config.cache.backend, enabled=config.cache.enabled)

    # ========== 2) HTTP ==========
    http_client = build_http_client(config)
    fetcher = HttpFetcher(http_client, max_attempts=config.http_max_retries)
    log.info("http_client_initialized", timeout=config.http_timeout_seconds)

    try:
        # ========== 3) Site stages ==========
        site = config.site
        matcher = PageMatcher(
            fetcher, stage_cache, dialect=site, resolver=config.resolver
        )
        decoder = RedirectDecoder(fetcher, stage_cache)
        extractor = LinkExtractor(fetcher, decoder, stage_cache, dialect=site)
        resolver = BatchResolver(
            fetcher,
            extractor,
            dialect=site,
            max_concurrent=config.resolver.max_concurrent_entries,
        )

        # ========== 4) Metadata + use case ==========
        if not config.tmdb_api_key:
            log.warning("tmdb_api_key_missing")
        metadata = HttpxTmdbClient(
            api_key=config.tmdb_api_key or "",
            http_client=http_client,
            cache=stage_cache,
        )
        use_case = ResolveStreamsUseCase(
            metadata=metadata, matcher=matcher, resolver=resolver
        )
        log.info("pipeline_ready", base_url=site.base_url)

        yield Pipeline(
            config=config,
            cache=cache,
            http_client=http_client,
            fetcher=fetcher,
            matcher=matcher,
            decoder=decoder,
            extractor=extractor,
            resolver=resolver,
            use_case=use_case,
        )
    finally:
        # ========== Cleanup (reverse order) ==========
        await http_client.aclose()
        log.info("http_client_closed")

        await cache.aclose()
        log.info("cache_closed")


async def resolve_streams(
    content_id: str,
    media_kind: str,
    season: int | None = None,
    episode: int | None = None,
    *,
    config: AppConfig | None = None,
) -> list[StreamDescriptor]:
    """One-shot convenience wrapper around the use case.

    Never raises; a bad ``media_kind`` or any setup failure yields ``[]``.

    Logging is left to the host process: call
    :func:`~hubstream.infrastructure.logging.setup.configure_logging` with the
    same config first, otherwise the ``debug`` toggle has no effect.
    """
    try:
        kind = normalize_media_kind(media_kind)
    except ValueError:
        log.warning("stream_bad_media_kind", media_kind=media_kind)
        return []

    request = StreamRequest(
        content_id=content_id, media_kind=kind, season=season, episode=episode
    )
    try:
        cfg = config if config is not None else load_config()
        async with build_pipeline(cfg) as pipeline:
            return await pipeline.use_case.execute(request)
    except Exception:  # noqa: BLE001
        log.error("pipeline_failed", content_id=content_id, exc_info=True)
        return []
