"""Walk hop pages from a content entry to final downloadable links.

Two stages, composed by the batch resolver:

* entry -> cloud URL: a cloud-hop anchor is decoded directly; a
  drive-hop anchor is decoded, its page fetched and the nested cloud
  anchor's raw href returned.
* cloud URL -> final links: the cloud page (fetched with itself as
  ``Referer``) points at the links page through an inline script
  assignment or meta refresh; that page's anchors are classified into
  FSL / PixelServer / Direct.
"""

from __future__ import annotations

from urllib.parse import urljoin

import structlog

from hubstream.domain.entities.links import (
    EntryMeta,
    HopKind,
    LinkSource,
    ResolvedLink,
    SourceEntry,
)
from hubstream.domain.exceptions import ParseError
from hubstream.domain.ports.fetcher import PageFetcherPort
from hubstream.infrastructure.cache.stage_cache import (
    CacheStage,
    StageCache,
    normalize_url_key,
)
from hubstream.infrastructure.common.html_selectors import (
    extract_links,
    extract_text,
    find_anchor_href,
    parse_html,
)
from hubstream.infrastructure.common.parsers import is_absolute_url, parse_size_to_bytes
from hubstream.infrastructure.config.schema import SiteDialect
from hubstream.infrastructure.site.extraction import (
    CLOUD_STRATEGIES,
    Strategy,
    run_strategies,
)
from hubstream.infrastructure.site.redirect_decoder import RedirectDecoder

log = structlog.get_logger(__name__)


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(k.lower() in lowered for k in keywords)


class LinkExtractor:
    def __init__(
        self,
        fetcher: PageFetcherPort,
        decoder: RedirectDecoder,
        cache: StageCache,
        *,
        dialect: SiteDialect,
        strategies: tuple[Strategy, ...] = CLOUD_STRATEGIES,
    ) -> None:
        self._fetcher = fetcher
        self._decoder = decoder
        self._cache = cache
        self._dialect = dialect
        self._strategies = strategies

    # ------------------------------------------------------------------
    # Entry -> cloud URL
    # ------------------------------------------------------------------

    async def resolve_cloud_url(self, entry: SourceEntry) -> str | None:
        """Return the cloud-hop URL for *entry*, or None."""
        if entry.hop_kind is HopKind.CLOUD:
            return await self._decoder.resolve(entry.redirect_href)

        drive_url = await self._decoder.resolve(entry.redirect_href)
        if not drive_url:
            return None
        drive_html = await self._fetcher.fetch_text(drive_url)
        if not drive_html:
            return None
        cloud_href = find_anchor_href(parse_html(drive_html), self._dialect.cloud_label)
        if cloud_href is None:
            log.debug("drive_page_without_cloud_link", url=drive_url)
            return None
        return urljoin(drive_url, cloud_href)

    # ------------------------------------------------------------------
    # Cloud URL -> final links
    # ------------------------------------------------------------------

    def classify_links(
        self, html: str, page_url: str, base_meta: EntryMeta
    ) -> list[ResolvedLink]:
        """Classify the anchors of a final links page.

        Page-level size and title override *base_meta* when present.
        """
        d = self._dialect
        soup = parse_html(html)

        page_size = parse_size_to_bytes(extract_text(soup, d.final_size))
        page_title = extract_text(soup, d.final_title).replace(d.title_suffix, "").strip()
        meta = EntryMeta(
            title=page_title or base_meta.title,
            size_bytes=page_size if page_size > 0 else base_meta.size_bytes,
            height_px=base_meta.height_px,
        )

        results: list[ResolvedLink] = []
        emitted: set[str] = set()
        for link in extract_links(soup, base_url=page_url):
            href, text = link["href"], link["text"]
            if not href or href == "#":
                continue
            if _contains_any(text, d.fsl_labels):
                source, url = LinkSource.FSL, href
            elif _contains_any(text, d.pixel_labels):
                source = LinkSource.PIXEL_SERVER
                url = href.replace(d.pixel_path_from, d.pixel_path_to, 1)
            elif _contains_any(text, d.direct_labels) or any(
                cls in link["class"].split() for cls in d.direct_classes
            ):
                if href in emitted:
                    continue
                source, url = LinkSource.DIRECT, href
            else:
                continue
            if not is_absolute_url(url):
                log.debug("final_link_not_absolute", href=url)
                continue
            emitted.add(url)
            results.append(ResolvedLink(source=source, url=url, meta=meta))
        return results

    async def extract_final_links(
        self, cloud_url: str, base_meta: EntryMeta
    ) -> list[ResolvedLink]:
        """Resolve *cloud_url* to its final links (cached in ``final_links``)."""
        if not cloud_url:
            return []

        key = normalize_url_key(cloud_url)
        cached = await self._cache.get(CacheStage.FINAL_LINKS, key)
        if isinstance(cached, list) and cached:
            try:
                return [ResolvedLink.from_dict(item) for item in cached]
            except (KeyError, TypeError, ValueError):
                log.warning("final_links_cache_corrupt", url=cloud_url)

        headers = {"Referer": cloud_url}
        cloud_html = await self._fetcher.fetch_text(cloud_url, headers=headers)
        if not cloud_html:
            return []

        try:
            token = run_strategies(cloud_html, self._strategies)
        except ParseError:
            log.warning("cloud_destination_missing", url=cloud_url)
            return []
        links_url = urljoin(cloud_url, token.value)

        links_html = await self._fetcher.fetch_text(links_url, headers=headers)
        if not links_html:
            return []

        results = self.classify_links(links_html, links_url, base_meta)
        log.info(
            "final_links_extracted",
            url=cloud_url,
            strategy=token.strategy,
            count=len(results),
        )
        if results:
            await self._cache.set(
                CacheStage.FINAL_LINKS, key, [r.to_dict() for r in results]
            )
        return results

    async def extract(self, entry: SourceEntry) -> list[ResolvedLink]:
        """Both stages for one entry."""
        cloud_url = await self.resolve_cloud_url(entry)
        if not cloud_url:
            log.debug("entry_without_cloud_url", title=entry.title, hop=entry.hop_kind.value)
            return []
        return await self.extract_final_links(cloud_url, entry.meta)
