"""Port for the external metadata lookup."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from hubstream.domain.entities.links import MediaKind, TitleInfo


@runtime_checkable
class MetadataPort(Protocol):
    """Async interface resolving an external content ID to title and year."""

    async def get_title_and_year(
        self, content_id: str, media_kind: MediaKind
    ) -> TitleInfo | None:
        """Return title/year for *content_id*, or None if the lookup fails."""
        ...
