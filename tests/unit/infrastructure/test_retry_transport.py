"""Tests for RetryTransport (transport-error and 5xx retry with backoff)."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from hubstream.infrastructure.common.retry_transport import RetryTransport

_SLEEP = "hubstream.infrastructure.common.retry_transport.asyncio.sleep"


def _make_request(url: str = "https://example.com/page") -> httpx.Request:
    return httpx.Request("GET", url)


def _make_transport(
    side_effect: list, *, max_attempts: int = 3
) -> tuple[RetryTransport, AsyncMock]:
    wrapped = AsyncMock(spec=httpx.AsyncBaseTransport)
    wrapped.handle_async_request = AsyncMock(side_effect=side_effect)
    return RetryTransport(wrapped, max_attempts=max_attempts), wrapped


class TestRetryTransport:
    @pytest.mark.asyncio()
    async def test_passes_through_successful_response(self) -> None:
        transport, wrapped = _make_transport([httpx.Response(200)])
        with patch(_SLEEP, new_callable=AsyncMock) as sleep:
            resp = await transport.handle_async_request(_make_request())
        assert resp.status_code == 200
        assert wrapped.handle_async_request.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio()
    async def test_client_errors_are_not_retried(self) -> None:
        transport, wrapped = _make_transport([httpx.Response(404)])
        with patch(_SLEEP, new_callable=AsyncMock) as sleep:
            resp = await transport.handle_async_request(_make_request())
        assert resp.status_code == 404
        assert wrapped.handle_async_request.await_count == 1
        sleep.assert_not_awaited()

    @pytest.mark.asyncio()
    async def test_server_error_is_retried_then_succeeds(self) -> None:
        transport, wrapped = _make_transport([httpx.Response(503), httpx.Response(200)])
        with patch(_SLEEP, new_callable=AsyncMock) as sleep:
            resp = await transport.handle_async_request(_make_request())
        assert resp.status_code == 200
        assert wrapped.handle_async_request.await_count == 2
        assert [c.args[0] for c in sleep.await_args_list] == [1.0]

    @pytest.mark.asyncio()
    async def test_persistent_server_error_returns_last_response(self) -> None:
        transport, wrapped = _make_transport(
            [httpx.Response(502), httpx.Response(503), httpx.Response(504)]
        )
        with patch(_SLEEP, new_callable=AsyncMock) as sleep:
            resp = await transport.handle_async_request(_make_request())
        assert resp.status_code == 504
        assert wrapped.handle_async_request.await_count == 3
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio()
    async def test_retries_transport_error_then_succeeds(self) -> None:
        transport, wrapped = _make_transport(
            [httpx.ConnectError("refused"), httpx.ReadTimeout("slow"), httpx.Response(200)]
        )
        with patch(_SLEEP, new_callable=AsyncMock) as sleep:
            resp = await transport.handle_async_request(_make_request())
        assert resp.status_code == 200
        assert wrapped.handle_async_request.await_count == 3
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio()
    async def test_exhausted_attempts_reraise_last_error(self) -> None:
        transport, wrapped = _make_transport(
            [httpx.ConnectError("a"), httpx.ConnectError("b"), httpx.ConnectError("c")]
        )
        with patch(_SLEEP, new_callable=AsyncMock) as sleep:
            with pytest.raises(httpx.ConnectError, match="c"):
                await transport.handle_async_request(_make_request())
        assert wrapped.handle_async_request.await_count == 3
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0, 4.0]

    def test_rejects_zero_attempts(self) -> None:
        with pytest.raises(ValueError):
            RetryTransport(AsyncMock(spec=httpx.AsyncBaseTransport), max_attempts=0)

    @pytest.mark.asyncio()
    async def test_aclose_closes_wrapped(self) -> None:
        transport, wrapped = _make_transport([])
        await transport.aclose()
        wrapped.aclose.assert_awaited_once()
