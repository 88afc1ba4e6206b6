"""Resolve obfuscated redirect links into destination URLs."""

from __future__ import annotations

import structlog

from hubstream.domain.exceptions import DecodeError, ParseError
from hubstream.domain.ports.fetcher import PageFetcherPort
from hubstream.infrastructure.cache.stage_cache import (
    CacheStage,
    StageCache,
    normalize_url_key,
)
from hubstream.infrastructure.site.extraction import (
    REDIRECT_STRATEGIES,
    Strategy,
    decode_redirect_token,
    run_strategies,
)

log = structlog.get_logger(__name__)


class RedirectDecoder:
    """Fetch a redirect page and decode its token.

    The page carries the destination either as an ``'o'`` token run
    through :func:`decode_redirect_token`, or as a plain meta-refresh URL.
    Successful results are cached in the ``redirect`` namespace.
    """

    def __init__(
        self,
        fetcher: PageFetcherPort,
        cache: StageCache,
        *,
        strategies: tuple[Strategy, ...] = REDIRECT_STRATEGIES,
    ) -> None:
        self._fetcher = fetcher
        self._cache = cache
        self._strategies = strategies

    async def resolve(self, redirect_url: str) -> str | None:
        """Return the destination URL, or None when nothing decodes."""
        if not redirect_url:
            return None

        key = normalize_url_key(redirect_url)
        cached = await self._cache.get(CacheStage.REDIRECT, key)
        if isinstance(cached, str) and cached:
            return cached

        html = await self._fetcher.fetch_text(redirect_url)
        if not html:
            return None

        try:
            token = run_strategies(html, self._strategies)
            destination = (
                decode_redirect_token(token.value) if token.encoded else token.value
            )
        except ParseError:
            log.warning("redirect_token_missing", url=redirect_url)
            return None
        except DecodeError as exc:
            log.warning("redirect_decode_failed", url=redirect_url, stage=exc.stage)
            return None

        log.debug("redirect_resolved", url=redirect_url, strategy=token.strategy)
        await self._cache.set(CacheStage.REDIRECT, key, destination)
        return destination
