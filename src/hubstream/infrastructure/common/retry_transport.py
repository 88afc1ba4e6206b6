"""httpx transport retrying network failures and 5xx responses with backoff."""

from __future__ import annotations

import asyncio

import httpx
import structlog

log = structlog.get_logger(__name__)

_SERVER_ERROR_FLOOR = 500


class RetryTransport(httpx.AsyncBaseTransport):
    """Wraps an httpx transport and retries failed attempts.

    An attempt fails on ``httpx.TransportError`` (connection failures,
    read errors, timeouts) or on a 5xx response.  Failed attempts are
    retried until *max_attempts* attempts have been made, sleeping
    ``backoff_base * 2**attempt`` seconds in between (1s, 2s, 4s with
    the default base).  4xx responses are handed back untouched.

    When all attempts fail, the last 5xx response is returned for the
    caller to interpret, or the last ``TransportError`` is re-raised.
    """

    def __init__(
        self,
        wrapped: httpx.AsyncBaseTransport,
        *,
        max_attempts: int = 3,
        backoff_base: float = 1.0,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._wrapped = wrapped
        self._max_attempts = max_attempts
        self._backoff_base = backoff_base

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        """Send *request*, retrying transport failures and 5xx with backoff."""
        last_error: httpx.TransportError | None = None

        for attempt in range(self._max_attempts):
            try:
                resp = await self._wrapped.handle_async_request(request)
            except httpx.TransportError as exc:
                last_error = exc
                reason = type(exc).__name__
            else:
                if resp.status_code < _SERVER_ERROR_FLOOR:
                    return resp
                if attempt + 1 == self._max_attempts:
                    return resp
                await resp.aclose()
                reason = f"HTTP {resp.status_code}"

            delay = self._compute_delay(attempt)
            log.info(
                "http_retry",
                url=str(request.url),
                attempt=attempt + 1,
                max_attempts=self._max_attempts,
                error=reason,
                delay=delay,
            )
            await asyncio.sleep(delay)

        assert last_error is not None
        raise last_error

    def _compute_delay(self, attempt: int) -> float:
        return self._backoff_base * (2**attempt)

    async def aclose(self) -> None:
        """Close the wrapped transport."""
        await self._wrapped.aclose()
