"""ResolvedLink -> StreamDescriptor formatting."""

from __future__ import annotations

from hubstream.domain.entities.links import ResolvedLink, SourceEntry, StreamDescriptor
from hubstream.infrastructure.common.parsers import format_size


def to_stream_descriptor(
    link: ResolvedLink, entry: SourceEntry, *, source_name: str
) -> StreamDescriptor:
    """Quality comes from the originating entry, title and size from the link."""
    quality = f"{entry.height_px}p" if entry.height_px else None
    name = f"{source_name} - {link.source.value}"
    if quality:
        name = f"{name} {quality}"
    return StreamDescriptor(
        name=name,
        title=f"{link.meta.title}\n{format_size(link.meta.size_bytes)}",
        url=link.url,
        binge_group_key=f"{source_name.lower()}-{link.source.value}",
        quality_label=quality,
    )
