"""Tests for the per-domain rate limiter and the concurrency gate.

Intervals are kept short (fractions of a second) so the suite stays fast;
the behaviour does not depend on the magnitude.
"""

from __future__ import annotations

import asyncio
import time

import pytest

from pagesift.scraper.limits import ConcurrencyGate, DomainRateLimiter

_SLACK = 0.01


class TestDomainRateLimiter:
    async def test_first_request_does_not_wait(self) -> None:
        limiter = DomainRateLimiter(interval=0.5)
        start = time.monotonic()
        await limiter.wait("example.com")
        assert time.monotonic() - start < 0.05

    async def test_same_host_is_spaced(self) -> None:
        limiter = DomainRateLimiter(interval=0.2)
        await limiter.wait("example.com")
        first = limiter.last_request("example.com")
        await limiter.wait("example.com")
        second = limiter.last_request("example.com")
        assert first is not None and second is not None
        assert second - first >= 0.2 - _SLACK

    async def test_hostnames_are_case_insensitive(self) -> None:
        limiter = DomainRateLimiter(interval=0.2)
        await limiter.wait("Example.COM")
        start = time.monotonic()
        await limiter.wait("example.com")
        assert time.monotonic() - start >= 0.2 - _SLACK

    async def test_different_hosts_do_not_wait(self) -> None:
        limiter = DomainRateLimiter(interval=1.0)
        start = time.monotonic()
        await limiter.wait("a.example.com")
        await limiter.wait("b.example.com")
        assert time.monotonic() - start < 0.1

    async def test_concurrent_waiters_are_all_spaced(self) -> None:
        limiter = DomainRateLimiter(interval=0.1)
        admitted: list[float] = []

        async def request() -> None:
            await limiter.wait("example.com")
            admitted.append(time.monotonic())

        await asyncio.gather(*(request() for _ in range(3)))
        admitted.sort()
        gaps = [b - a for a, b in zip(admitted, admitted[1:])]
        assert all(gap >= 0.1 - _SLACK for gap in gaps)

    async def test_zero_interval_never_waits(self) -> None:
        limiter = DomainRateLimiter(interval=0.0)
        start = time.monotonic()
        for _ in range(10):
            await limiter.wait("example.com")
        assert time.monotonic() - start < 0.05


class TestConcurrencyGate:
    def test_rejects_non_positive_limit(self) -> None:
        with pytest.raises(ValueError):
            ConcurrencyGate(0)

    async def test_caps_in_flight_work(self) -> None:
        gate = ConcurrencyGate(2)
        peak = 0

        async def work() -> None:
            nonlocal peak
            async with gate.slot():
                peak = max(peak, gate.active)
                await asyncio.sleep(0.02)

        await asyncio.gather(*(work() for _ in range(6)))
        assert peak == 2
        assert gate.active == 0

    async def test_slot_released_on_exception(self) -> None:
        gate = ConcurrencyGate(1)
        with pytest.raises(RuntimeError):
            async with gate.slot():
                assert gate.active == 1
                raise RuntimeError("boom")
        assert gate.active == 0

        # The single slot must be available again.
        await asyncio.wait_for(self._hold(gate), timeout=0.5)

    async def test_slot_released_on_cancellation(self) -> None:
        gate = ConcurrencyGate(1)
        started = asyncio.Event()

        async def blocked() -> None:
            async with gate.slot():
                started.set()
                await asyncio.sleep(10)

        task = asyncio.create_task(blocked())
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert gate.active == 0

    @staticmethod
    async def _hold(gate: ConcurrencyGate) -> None:
        async with gate.slot():
            pass
