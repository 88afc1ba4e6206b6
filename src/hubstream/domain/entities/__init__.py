from .links import (
    CANONICAL_HEIGHTS,
    EntryMeta,
    EpisodeFilter,
    HopKind,
    LinkSource,
    MediaKind,
    ResolvedLink,
    SearchCandidate,
    SourceEntry,
    StreamDescriptor,
    StreamRequest,
    TitleInfo,
)

__all__ = [
    "CANONICAL_HEIGHTS",
    "EntryMeta",
    "EpisodeFilter",
    "HopKind",
    "LinkSource",
    "MediaKind",
    "ResolvedLink",
    "SearchCandidate",
    "SourceEntry",
    "StreamDescriptor",
    "StreamRequest",
    "TitleInfo",
]
