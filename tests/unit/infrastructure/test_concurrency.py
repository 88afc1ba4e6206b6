"""Tests for BoundedPool (sliding-window concurrency cap)."""

from __future__ import annotations

import asyncio
import time

import pytest

from hubstream.infrastructure.concurrency import BoundedPool


class TestBoundedPoolInit:
    def test_default_limit(self) -> None:
        pool = BoundedPool()
        assert pool.limit == 5
        assert pool.in_flight == 0
        assert pool.peak == 0

    def test_rejects_zero_limit(self) -> None:
        with pytest.raises(ValueError):
            BoundedPool(0)

    @pytest.mark.asyncio()
    async def test_slot_tracks_in_flight(self) -> None:
        pool = BoundedPool(2)
        async with pool.slot():
            assert pool.in_flight == 1
            async with pool.slot():
                assert pool.in_flight == 2
        assert pool.in_flight == 0
        assert pool.peak == 2


class TestMapAsCompleted:
    @pytest.mark.asyncio()
    async def test_cap_is_never_exceeded(self) -> None:
        pool = BoundedPool(5)
        observed: list[int] = []

        async def work(i: int) -> int:
            observed.append(pool.in_flight)
            await asyncio.sleep(0.05)
            return i

        results = [r async for r in pool.map_as_completed(range(12), work)]

        assert sorted(results) == list(range(12))
        assert max(observed) <= 5
        assert pool.peak == 5

    @pytest.mark.asyncio()
    async def test_wall_time_is_ceil_n_over_cap(self) -> None:
        """12 tasks x 0.1s under a cap of 5 -> about 3 rounds."""
        pool = BoundedPool(5)

        async def work(_: int) -> None:
            await asyncio.sleep(0.1)

        start = time.monotonic()
        _ = [r async for r in pool.map_as_completed(range(12), work)]
        elapsed = time.monotonic() - start

        assert 0.29 <= elapsed < 0.6

    @pytest.mark.asyncio()
    async def test_sliding_window_admits_on_first_completion(self) -> None:
        """One slow task must not hold back the others."""
        pool = BoundedPool(2)
        order: list[str] = []

        async def work(name: str) -> str:
            await asyncio.sleep(0.3 if name == "slow" else 0.05)
            order.append(name)
            return name

        start = time.monotonic()
        _ = [r async for r in pool.map_as_completed(["slow", "a", "b", "c"], work)]
        elapsed = time.monotonic() - start

        assert order[-1] == "slow"
        assert elapsed < 0.45

    @pytest.mark.asyncio()
    async def test_results_in_completion_order(self) -> None:
        pool = BoundedPool(3)

        async def work(delay: float) -> float:
            await asyncio.sleep(delay)
            return delay

        results = [r async for r in pool.map_as_completed([0.15, 0.05, 0.1], work)]
        assert results == [0.05, 0.1, 0.15]

    @pytest.mark.asyncio()
    async def test_empty_input(self) -> None:
        pool = BoundedPool()

        async def work(_: int) -> int:
            raise AssertionError("not called")

        assert [r async for r in pool.map_as_completed([], work)] == []
