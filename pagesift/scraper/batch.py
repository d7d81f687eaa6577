"""Batch helpers built on :meth:`ScraperEngine.scrape`.

Failures of individual URLs are recorded and the batch carries on; the
engine's concurrency gate bounds how many pages load at once.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Collection, Dict, Iterable, List

from pagesift.scraper.engine import OptionsArg, ScraperEngine
from pagesift.scraper.errors import describe_error
from pagesift.scraper.models import ScrapedData

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Outcome of a batch, keyed by URL."""

    scraped: Dict[str, ScrapedData] = field(default_factory=dict)
    skipped: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def scraped_count(self) -> int:
        return len(self.scraped)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


async def scrape_many(
    engine: ScraperEngine,
    urls: Iterable[str],
    options: OptionsArg = None,
    *,
    skip: Collection[str] = (),
) -> BatchResult:
    """Scrape every URL in *urls* concurrently.

    Duplicate URLs are scraped once.  URLs in *skip* (e.g. already stored)
    are listed in :attr:`BatchResult.skipped` without being fetched.
    """
    result = BatchResult()
    pending: List[str] = []
    for url in dict.fromkeys(urls):
        if url in skip:
            result.skipped.append(url)
        else:
            pending.append(url)

    outcomes = await asyncio.gather(
        *(engine.scrape(url, options) for url in pending), return_exceptions=True
    )
    for url, outcome in zip(pending, outcomes):
        if isinstance(outcome, ScrapedData):
            result.scraped[url] = outcome
        elif isinstance(outcome, Exception):
            logger.error("Skipping %s: %s", url, describe_error(outcome))
            result.failed[url] = describe_error(outcome)
        else:
            raise outcome

    logger.info(
        "Batch finished: %d scraped, %d skipped, %d failed",
        result.scraped_count,
        result.skipped_count,
        len(result.failed),
    )
    return result


async def scrape_listing(
    engine: ScraperEngine,
    listing_url: str,
    pattern: str,
    *,
    max_posts: int = 10,
    options: OptionsArg = None,
    skip: Collection[str] = (),
) -> BatchResult:
    """Scrape a listing page, then every linked post whose URL contains *pattern*.

    At most *max_posts* matching links are followed, in page order.

    Raises:
        ScrapeFailedError: If the listing page itself cannot be scraped.
    """
    listing = await engine.scrape(listing_url, options)
    post_urls = [link for link in listing.links if pattern in link][:max_posts]
    logger.info(
        "Found %d post link(s) matching %r on %s", len(post_urls), pattern, listing_url
    )
    return await scrape_many(engine, post_urls, options, skip=skip)
