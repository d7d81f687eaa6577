"""Scheduling primitives: per-domain rate limiting and a concurrency gate.

Both are owned by a single :class:`~pagesift.scraper.engine.ScraperEngine`
and only ever awaited from its event loop.
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

logger = logging.getLogger(__name__)


class DomainRateLimiter:
    """Enforce a minimum interval between navigations to the same hostname.

    Waiters for one host are serialized by a per-host lock; the navigation
    time is stamped *after* any delay so consecutive admissions are always at
    least ``interval`` seconds apart.  Different hosts never wait on each
    other.
    """

    def __init__(
        self,
        interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._interval = max(0.0, interval)
        self._clock = clock
        self._last_request: dict[str, float] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def interval(self) -> float:
        return self._interval

    def last_request(self, host: str) -> float | None:
        """Return the clock value of the last admitted request to *host*."""
        return self._last_request.get(host.lower())

    async def wait(self, host: str) -> None:
        """Suspend until a request to *host* is allowed, then record it."""
        host = host.lower()
        lock = self._locks.setdefault(host, asyncio.Lock())
        async with lock:
            last = self._last_request.get(host)
            if last is not None:
                remaining = self._interval - (self._clock() - last)
                if remaining > 0:
                    logger.debug("Rate limit: delaying %s by %.3fs", host, remaining)
                    await asyncio.sleep(remaining)
            self._last_request[host] = self._clock()


class ConcurrencyGate:
    """Cap the number of scrapes in flight at once.

    ``active`` counts currently held slots.  :meth:`slot` releases its slot
    exactly once on every exit path, including cancellation.
    """

    def __init__(self, limit: int = 5) -> None:
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        self._limit = limit
        self._semaphore = asyncio.Semaphore(limit)
        self._active = 0

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def active(self) -> int:
        return self._active

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        await self._semaphore.acquire()
        self._active += 1
        try:
            yield
        finally:
            self._active -= 1
            self._semaphore.release()
