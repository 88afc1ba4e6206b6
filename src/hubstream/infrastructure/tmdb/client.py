"""TMDB API client - async httpx implementation with caching."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from hubstream.domain.entities.links import MediaKind, TitleInfo
from hubstream.infrastructure.cache.stage_cache import CacheStage, StageCache

log = structlog.get_logger(__name__)

_BASE_URL = "https://api.themoviedb.org/3"


def _year_from_date(date_str: str | None) -> int:
    if not date_str:
        return 0
    head = date_str.split("-", 1)[0]
    return int(head) if head.isdigit() else 0


class HttpxTmdbClient:
    """Async TMDB client using httpx + StageCache.

    Implements ``MetadataPort`` from domain.ports.metadata.
    """

    def __init__(
        self,
        *,
        api_key: str,
        http_client: httpx.AsyncClient,
        cache: StageCache,
    ) -> None:
        self._api_key = api_key
        self._http = http_client
        self._cache = cache

    async def _get(self, path: str) -> dict[str, Any] | None:
        """GET request with error handling. Returns parsed JSON or None."""
        url = f"{_BASE_URL}{path}"
        try:
            resp = await self._http.get(url, params={"api_key": self._api_key})
            if resp.status_code == 401:
                log.error("tmdb_api_key_invalid", status=401)
                return None
            if resp.status_code == 404:
                log.debug("tmdb_resource_not_found", path=path)
                return None
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError:
            log.warning("tmdb_http_error", path=path, exc_info=True)
            return None
        except httpx.HTTPError:
            log.warning("tmdb_network_error", path=path, exc_info=True)
            return None
        except ValueError:
            log.warning("tmdb_invalid_json", path=path)
            return None
        return data if isinstance(data, dict) else None

    async def get_title_and_year(
        self, content_id: str, media_kind: MediaKind
    ) -> TitleInfo | None:
        """Title and release year for a TMDB id.

        Series read ``name``/``first_air_date``, movies
        ``title``/``release_date``.  Year is 0 when TMDB has no date.
        """
        is_series = media_kind == "series"
        endpoint = "tv" if is_series else "movie"
        cache_key = f"{endpoint}_{content_id}"

        cached = await self._cache.get(CacheStage.METADATA, cache_key)
        if isinstance(cached, dict) and cached.get("title"):
            return TitleInfo(title=str(cached["title"]), year=int(cached.get("year", 0)))

        data = await self._get(f"/{endpoint}/{content_id}")
        if data is None:
            return None

        if is_series:
            title = data.get("name")
            year = _year_from_date(data.get("first_air_date"))
        else:
            title = data.get("title")
            year = _year_from_date(data.get("release_date"))
        if not title:
            log.warning("tmdb_missing_title", content_id=content_id, kind=endpoint)
            return None

        info = TitleInfo(title=str(title), year=year)
        await self._cache.set(
            CacheStage.METADATA, cache_key, {"title": info.title, "year": info.year}
        )
        return info
