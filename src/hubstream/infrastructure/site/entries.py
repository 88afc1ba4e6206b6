"""Content page parsing: quality/release rows -> SourceEntry."""

from __future__ import annotations

import structlog
from bs4 import Tag

from hubstream.domain.entities.links import EpisodeFilter, HopKind, SourceEntry
from hubstream.infrastructure.common.html_selectors import (
    extract_text,
    find_anchor_href,
    parse_html,
    select_items,
)
from hubstream.infrastructure.common.parsers import parse_height, parse_size_to_bytes
from hubstream.infrastructure.config.schema import SiteDialect

log = structlog.get_logger(__name__)


def select_entry_elements(
    html: str, dialect: SiteDialect, episode: EpisodeFilter | None = None
) -> list[Tag]:
    """Pick the entry elements to resolve.

    With an episode filter only download items inside a season block
    whose title carries the season marker, and whose own text carries one
    of the episode markers, are returned.  Without one, every top-level
    movie entry is.
    """
    soup = parse_html(html)
    if episode is None:
        return select_items(soup, dialect.movie_entry)

    season_marker = dialect.season_marker.format(season=episode.season)
    episode_markers = [
        m.format(episode=episode.episode) for m in dialect.episode_markers
    ]
    items: list[Tag] = []
    for block in select_items(soup, dialect.episode_block):
        if season_marker not in extract_text(block, dialect.episode_block_title, strip=False):
            continue
        for item in select_items(block, dialect.episode_entry):
            text = item.get_text()
            if any(marker in text for marker in episode_markers):
                items.append(item)
    return items


def entry_from_element(element: Tag, dialect: SiteDialect) -> SourceEntry | None:
    """Build a SourceEntry from one row, or None when it has no hop link."""
    local_html = str(element)
    title = extract_text(element, dialect.entry_title)
    size_bytes = parse_size_to_bytes(local_html)
    height = parse_height(local_html, title)

    href = find_anchor_href(element, dialect.cloud_label)
    hop = HopKind.CLOUD
    if href is None:
        href = find_anchor_href(element, dialect.drive_label)
        hop = HopKind.DRIVE
    if href is None:
        log.debug("entry_without_hop", title=title)
        return None

    return SourceEntry(
        title=title,
        redirect_href=href,
        hop_kind=hop,
        size_bytes=size_bytes,
        height_px=height,
    )


def parse_source_entries(
    html: str, dialect: SiteDialect, episode: EpisodeFilter | None = None
) -> list[SourceEntry]:
    """Parse a content page into resolvable entries, in document order."""
    entries: list[SourceEntry] = []
    for element in select_entry_elements(html, dialect, episode):
        entry = entry_from_element(element, dialect)
        if entry is not None:
            entries.append(entry)
    return entries
