"""Resilient page fetcher.

Every outbound request of the pipeline goes through :class:`HttpFetcher`:
browser-like default headers, a per-request timeout and transport-level
retries with exponential backoff (see :class:`RetryTransport`).
"""

from __future__ import annotations

import httpx
import structlog

from hubstream.domain.exceptions import NetworkError
from hubstream.infrastructure.common.retry_transport import RetryTransport
from hubstream.infrastructure.config.schema import DEFAULT_USER_AGENT, AppConfig

log = structlog.get_logger(__name__)

BROWSER_HEADERS: dict[str, str] = {
    "User-Agent": DEFAULT_USER_AGENT,
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.5",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
}

# Status codes below this bound count as a usable response.
_SERVER_ERROR_FLOOR = 500


def build_http_client(config: AppConfig) -> httpx.AsyncClient:
    """Create the shared AsyncClient with the retry transport installed."""
    transport = RetryTransport(
        httpx.AsyncHTTPTransport(),
        max_attempts=config.http_max_retries,
        backoff_base=config.http_backoff_base,
    )
    headers = dict(BROWSER_HEADERS)
    headers["User-Agent"] = config.http_user_agent
    return httpx.AsyncClient(
        transport=transport,
        timeout=config.http_timeout_seconds,
        follow_redirects=config.http_follow_redirects,
        headers=headers,
    )


class HttpFetcher:
    """GET with merged headers, retries and status interpretation.

    Implements ``PageFetcherPort``.
    """

    def __init__(self, client: httpx.AsyncClient, *, max_attempts: int = 3) -> None:
        self._client = client
        self._max_attempts = max_attempts

    async def fetch(
        self, url: str, *, headers: dict[str, str] | None = None
    ) -> httpx.Response:
        """GET *url*.

        Raises:
            NetworkError: when the request fails at the transport level
                after all attempts, or every attempt answered 5xx.
        """
        try:
            resp = await self._client.get(url, headers=headers or None)
        except httpx.HTTPError as exc:
            log.warning(
                "fetch_failed",
                url=url,
                attempts=self._max_attempts,
                error=type(exc).__name__,
            )
            raise NetworkError(url, self._max_attempts, type(exc).__name__) from exc

        if not 200 <= resp.status_code < _SERVER_ERROR_FLOOR:
            log.warning("fetch_bad_status", url=url, status=resp.status_code)
            raise NetworkError(url, self._max_attempts, f"HTTP {resp.status_code}")

        log.debug("fetch_ok", url=url, status=resp.status_code, bytes=len(resp.content))
        return resp

    async def fetch_text(
        self, url: str, *, headers: dict[str, str] | None = None
    ) -> str | None:
        """Like :meth:`fetch` but returns the body, or None on failure."""
        try:
            resp = await self.fetch(url, headers=headers)
        except NetworkError:
            return None
        return resp.text
