"""Bounded sliding-window concurrency for entry resolution.

A single :class:`asyncio.Semaphore` caps how many coroutines are in
flight.  Unlike fixed-size batching, a new task starts the moment any
running one finishes, so one slow entry never idles the other slots.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Iterable, TypeVar

import structlog

log = structlog.get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class BoundedPool:
    """Sliding-window pool.

    Parameters:
        limit: Maximum number of slots held at the same time.

    ``in_flight`` and ``peak`` are exposed so callers (and tests) can
    observe that the cap holds.
    """

    def __init__(self, limit: int = 5) -> None:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        self.limit = limit
        self._sem = asyncio.Semaphore(limit)
        self._in_flight = 0
        self._peak = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def peak(self) -> int:
        return self._peak

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        """Hold one slot for the duration of the block."""
        async with self._sem:
            self._in_flight += 1
            self._peak = max(self._peak, self._in_flight)
            try:
                yield
            finally:
                self._in_flight -= 1

    async def map_as_completed(
        self,
        items: Iterable[T],
        func: Callable[[T], Awaitable[R]],
    ) -> AsyncIterator[R]:
        """Run ``func(item)`` for every item, yielding results as they finish.

        Exceptions raised by ``func`` propagate to the consumer at the
        point the failing task completes; callers that need per-item
        isolation catch inside ``func``.
        """

        async def _run(item: T) -> R:
            async with self.slot():
                return await func(item)

        tasks = [asyncio.ensure_future(_run(item)) for item in items]
        if not tasks:
            return
        try:
            for next_done in asyncio.as_completed(tasks):
                yield await next_done
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            log.debug("pool_drained", tasks=len(tasks), peak=self._peak)
