"""Per-stage namespaced view over a CachePort.

Each pipeline stage (search, redirect, final links, metadata) owns its
own key namespace and TTL so that stages expire independently.  Keys are
pure functions of the stage's semantic input.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any

import structlog

from hubstream.domain.ports.cache import CachePort

log = structlog.get_logger(__name__)

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")

# Bumped whenever the shape of a cached value changes.
_KEY_VERSION = "v1"


class CacheStage(str, Enum):
    SEARCH = "search"
    REDIRECT = "redirect"
    FINAL_LINKS = "final_links"
    METADATA = "metadata"


def normalize_title_key(title: str, year: int | None) -> str:
    """Key for the search stage: lower-cased title slug plus year."""
    slug = _NON_ALNUM_RE.sub("_", title.lower()).strip("_")
    return f"{slug}_{year or 0}"


def normalize_url_key(url: str) -> str:
    """Key for URL-keyed stages: trimmed URL with the scheme/host lower-cased.

    Path and query keep their case because redirect tokens are
    case-sensitive.
    """
    url = url.strip()
    scheme, sep, rest = url.partition("://")
    if not sep:
        return url
    host, slash, tail = rest.partition("/")
    return f"{scheme.lower()}://{host.lower()}{slash}{tail}"


class StageCache:
    """Read-through / write-after helper keyed by stage.

    Backend errors never propagate: a failed read is a miss and a failed
    write is dropped.
    """

    def __init__(
        self,
        cache: CachePort,
        ttls: dict[CacheStage, int],
        *,
        enabled: bool = True,
    ) -> None:
        self._cache = cache
        self._ttls = dict(ttls)
        self.enabled = enabled

    @staticmethod
    def key(stage: CacheStage, raw_key: str) -> str:
        return f"hubstream:{_KEY_VERSION}:{stage.value}:{raw_key}"

    def ttl(self, stage: CacheStage) -> int:
        return self._ttls.get(stage, 3600)

    async def get(self, stage: CacheStage, raw_key: str) -> Any | None:
        if not self.enabled:
            return None
        key = self.key(stage, raw_key)
        try:
            value = await self._cache.get(key)
        except Exception:  # noqa: BLE001
            log.warning("stage_cache_get_failed", stage=stage.value, exc_info=True)
            return None
        if value is not None:
            log.debug("stage_cache_hit", stage=stage.value, key=raw_key)
        return value

    async def set(self, stage: CacheStage, raw_key: str, value: Any) -> None:
        if not self.enabled:
            return
        key = self.key(stage, raw_key)
        try:
            await self._cache.set(key, value, ttl=self.ttl(stage))
        except Exception:  # noqa: BLE001
            log.warning("stage_cache_set_failed", stage=stage.value, exc_info=True)
