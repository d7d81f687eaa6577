"""Retry-with-linear-backoff wrapper for a single scrape attempt."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from pagesift.scraper.errors import InvalidInputError, ScrapeFailedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LinearBackoff:
    """Sleep ``base_seconds * attempt`` between attempts (1x, 2x, 3x ...)."""

    def __init__(self, base_seconds: float = 1.0) -> None:
        self._base = base_seconds

    def get_sleep(self, attempt: int) -> float:
        """Return the delay in seconds that follows failed *attempt*."""
        return self._base * max(attempt, 1)


async def retry_with_backoff(
    operation: Callable[[int], Awaitable[T]],
    *,
    url: str,
    attempts: int,
    backoff: LinearBackoff,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation(attempt)`` until it succeeds or *attempts* are used up.

    Input errors propagate immediately without consuming a retry.  Any other
    exception is logged and retried after ``backoff.get_sleep(attempt)``
    seconds.

    Raises:
        ValueError: If *attempts* is less than 1.
        InvalidInputError: Straight from *operation*.
        ScrapeFailedError: After the final attempt fails, chained from the
            last underlying error.
    """
    if attempts < 1:
        raise ValueError(f"attempts must be at least 1, got {attempts}")

    attempt = 1
    while True:
        try:
            return await operation(attempt)
        except InvalidInputError:
            raise
        except Exception as exc:
            logger.warning(
                "Scraping attempt %d/%d failed for %s: %s", attempt, attempts, url, exc
            )
            if attempt >= attempts:
                logger.error("Giving up on %s after %d attempt(s)", url, attempts)
                raise ScrapeFailedError(url, attempts, exc) from exc
        await sleep(backoff.get_sleep(attempt))
        attempt += 1
