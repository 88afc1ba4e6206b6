"""Locate the content page for a title on the site's search listing."""

from __future__ import annotations

import re
from urllib.parse import quote, urljoin

import structlog
from bs4 import Tag
from rapidfuzz.distance import Levenshtein

from hubstream.domain.entities.links import SearchCandidate
from hubstream.domain.ports.fetcher import PageFetcherPort
from hubstream.infrastructure.cache.stage_cache import (
    CacheStage,
    StageCache,
    normalize_title_key,
)
from hubstream.infrastructure.common.html_selectors import (
    extract_attr,
    extract_text,
    parse_html,
    select_items,
)
from hubstream.infrastructure.config.schema import ResolverConfig, SiteDialect

log = structlog.get_logger(__name__)

_BRACKET_TAG_RE = re.compile(r"\[.*?]")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def clean_card_title(raw: str) -> str:
    """Strip bracketed tags like ``[4K]`` from a card title."""
    return _BRACKET_TAG_RE.sub("", raw).strip()


def _badge_labels(card: Tag, selector: str) -> str:
    """Text of every format badge on a card, space-joined."""
    return " ".join(filter(None, (extract_text(b) for b in select_items(card, selector))))


def _leading_int(text: str) -> int | None:
    match = _LEADING_INT_RE.match(text)
    return int(match.group(1)) if match else None


class PageMatcher:
    """Fuzzy title/year/kind match against search result cards.

    The site's own ranking is authoritative: the first surviving card in
    document order wins.  Hits are cached per (title, year); misses are
    not.
    """

    def __init__(
        self,
        fetcher: PageFetcherPort,
        cache: StageCache,
        *,
        dialect: SiteDialect,
        resolver: ResolverConfig,
    ) -> None:
        self._fetcher = fetcher
        self._cache = cache
        self._dialect = dialect
        self._max_distance = resolver.match_max_distance
        self._year_tolerance = resolver.year_tolerance

    def parse_candidates(self, html: str) -> list[SearchCandidate]:
        """Parse listing cards, resolving hrefs against the site root."""
        d = self._dialect
        soup = parse_html(html)
        candidates: list[SearchCandidate] = []
        for card in select_items(soup, d.search_card):
            href = extract_attr(card, "href")
            if not href:
                anchor = card.select_one("a[href]")
                href = extract_attr(anchor, "href") if anchor else ""
            if not href:
                continue
            candidates.append(
                SearchCandidate(
                    href=urljoin(d.base_url + "/", href),
                    display_title=clean_card_title(extract_text(card, d.card_title)),
                    listed_year=_leading_int(extract_text(card, d.card_meta)),
                    media_kind_label=_badge_labels(card, d.card_format),
                )
            )
        return candidates

    def accepts(
        self, candidate: SearchCandidate, title: str, year: int, is_series: bool
    ) -> bool:
        kind = self._dialect.series_kind_label if is_series else self._dialect.movie_kind_label
        if kind not in candidate.media_kind_label:
            return False
        if candidate.listed_year is None:
            return False
        if abs(candidate.listed_year - year) > self._year_tolerance:
            return False
        distance = Levenshtein.distance(
            candidate.display_title.lower(), title.lower()
        )
        return distance < self._max_distance

    async def find_page(self, title: str, year: int, is_series: bool) -> str | None:
        """Return the content page URL, or None when no card matches."""
        key = normalize_title_key(title, year)
        cached = await self._cache.get(CacheStage.SEARCH, key)
        if isinstance(cached, str) and cached:
            log.debug("page_match_cache_hit", title=title, year=year)
            return cached

        search_url = self._dialect.search_url(quote(f"{title} {year}", safe=""))
        html = await self._fetcher.fetch_text(search_url)
        if not html:
            return None

        candidates = self.parse_candidates(html)
        for candidate in candidates:
            if self.accepts(candidate, title, year, is_series):
                log.info(
                    "page_match_found",
                    title=title,
                    year=year,
                    url=candidate.href,
                    card_title=candidate.display_title,
                )
                await self._cache.set(CacheStage.SEARCH, key, candidate.href)
                return candidate.href

        log.info(
            "page_match_not_found",
            title=title,
            year=year,
            cards=len(candidates),
        )
        return None
