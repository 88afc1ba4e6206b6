"""Domain entities for the link resolution pipeline.

Pure value objects: no framework dependencies, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

MediaKind = Literal["movie", "series"]

# Canonical vertical resolutions a SourceEntry may carry (0 = unknown).
CANONICAL_HEIGHTS: tuple[int, ...] = (480, 720, 1080, 2160)


class HopKind(str, Enum):
    """Intermediate landing page kind an entry is routed through."""

    CLOUD = "cloud"
    DRIVE = "drive"


class LinkSource(str, Enum):
    """Final file-hosting backend surfaced on the links page."""

    FSL = "FSL"
    PIXEL_SERVER = "PixelServer"
    DIRECT = "Direct"


@dataclass(frozen=True)
class TitleInfo:
    """Title and release year returned by the metadata lookup."""

    title: str
    year: int = 0


@dataclass(frozen=True)
class SearchCandidate:
    """One listing card parsed from the site's search results."""

    href: str
    display_title: str
    listed_year: int | None
    media_kind_label: str


@dataclass(frozen=True)
class EntryMeta:
    """Title, size and quality attached to a resolved link."""

    title: str = ""
    size_bytes: int = 0
    height_px: int = 0

    def __post_init__(self) -> None:
        if self.height_px and self.height_px not in CANONICAL_HEIGHTS:
            raise ValueError(f"non-canonical height: {self.height_px}")

    def to_dict(self) -> dict[str, object]:
        return {
            "title": self.title,
            "size_bytes": self.size_bytes,
            "height_px": self.height_px,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> EntryMeta:
        return cls(
            title=str(data.get("title", "")),
            size_bytes=int(data.get("size_bytes", 0) or 0),  # type: ignore[arg-type]
            height_px=int(data.get("height_px", 0) or 0),  # type: ignore[arg-type]
        )


@dataclass(frozen=True)
class SourceEntry:
    """One quality/release row on a content page.

    ``hop_kind`` is the hop the entry is routed through; ``redirect_href``
    is the raw (still obfuscated) link for that hop.
    """

    title: str
    redirect_href: str
    hop_kind: HopKind
    size_bytes: int = 0
    height_px: int = 0

    def __post_init__(self) -> None:
        if self.height_px and self.height_px not in CANONICAL_HEIGHTS:
            raise ValueError(f"non-canonical height: {self.height_px}")

    @property
    def meta(self) -> EntryMeta:
        return EntryMeta(
            title=self.title,
            size_bytes=self.size_bytes,
            height_px=self.height_px,
        )


@dataclass(frozen=True)
class ResolvedLink:
    """Terminal artifact: an absolute, downloadable URL plus its metadata."""

    source: LinkSource
    url: str
    meta: EntryMeta = field(default_factory=EntryMeta)

    def to_dict(self) -> dict[str, object]:
        return {
            "source": self.source.value,
            "url": self.url,
            "meta": self.meta.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> ResolvedLink:
        meta = data.get("meta") or {}
        return cls(
            source=LinkSource(str(data["source"])),
            url=str(data["url"]),
            meta=EntryMeta.from_dict(meta),  # type: ignore[arg-type]
        )


@dataclass(frozen=True)
class StreamDescriptor:
    """Output unit handed to the downstream player/aggregator."""

    name: str  # e.g. "4KHDHub - FSL 1080p"
    title: str  # e.g. "Movie.2023.1080p.mkv\n2.1 GB"
    url: str
    binge_group_key: str
    quality_label: str | None = None  # e.g. "1080p"

    def to_dict(self) -> dict[str, object]:
        """Serialize into the player's stream object shape."""
        data: dict[str, object] = {
            "name": self.name,
            "title": self.title,
            "url": self.url,
            "behaviorHints": {"bingeGroup": self.binge_group_key},
        }
        if self.quality_label:
            data["quality"] = self.quality_label
        return data


@dataclass(frozen=True)
class StreamRequest:
    """Parsed top-level request.

    ``content_id`` is the external metadata ID; season/episode are only
    meaningful for series.
    """

    content_id: str
    media_kind: MediaKind
    season: int | None = None
    episode: int | None = None

    @property
    def is_series(self) -> bool:
        return self.media_kind == "series"


@dataclass(frozen=True)
class EpisodeFilter:
    """Season/episode restriction applied to a series content page."""

    season: int
    episode: int
