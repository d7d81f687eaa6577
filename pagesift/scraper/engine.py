"""Headless-browser scraper engine.

:meth:`ScraperEngine.scrape` composes the pieces of the pipeline:

    validate → concurrency slot → retry(rate limit → page → navigate →
    wait-for-selector → HTML) → extract

Each collaborator (browser handle, rate limiter, gate) is owned by the engine
instance and can be injected, which is how the tests run without a browser.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from pagesift.config import Settings, settings as default_settings
from pagesift.scraper.browser import BrowserHandle
from pagesift.scraper.errors import (
    InvalidUrlError,
    NavigationTimeoutError,
    SelectorNotFoundError,
)
from pagesift.scraper.extractor import extract_scraped_data
from pagesift.scraper.limits import ConcurrencyGate, DomainRateLimiter
from pagesift.scraper.models import ScrapedData, ScrapingOptions
from pagesift.scraper.retry import LinearBackoff, retry_with_backoff
from pagesift.scraper.urls import parse_http_url

logger = logging.getLogger(__name__)

OptionsArg = Union[ScrapingOptions, Mapping[str, Any], None]


def validate_url(url: str) -> str:
    """Return the hostname of *url*, or raise if it is not absolute http(s).

    Raises:
        InvalidUrlError: For anything that cannot be navigated to.
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidUrlError(str(url), "empty URL")
    return parse_http_url(url).host


class ScraperEngine:
    """Scrape pages through one shared, lazily launched browser.

    Usage::

        async with ScraperEngine() as engine:
            data = await engine.scrape("https://example.com/post")

    Args:
        settings: Source of defaults; the module-level settings when omitted.
        browser: Browser handle to use instead of building one from settings.
        rate_limiter: Per-domain limiter to use instead of the default.
        gate: Concurrency gate to use instead of the default.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        browser: Optional[BrowserHandle] = None,
        rate_limiter: Optional[DomainRateLimiter] = None,
        gate: Optional[ConcurrencyGate] = None,
    ) -> None:
        self._settings = settings or default_settings
        self._defaults = ScrapingOptions.from_settings(self._settings)
        self._browser = browser or BrowserHandle(
            self._settings.scraper_browser, headless=self._settings.scraper_headless
        )
        self._rate_limiter = rate_limiter or DomainRateLimiter(
            self._settings.scraper_domain_interval
        )
        self._gate = gate or ConcurrencyGate(self._settings.scraper_max_concurrent)
        self._backoff = LinearBackoff(self._settings.scraper_retry_delay)

    @property
    def defaults(self) -> ScrapingOptions:
        return self._defaults

    @property
    def active_requests(self) -> int:
        """Number of :meth:`scrape` calls currently holding a slot."""
        return self._gate.active

    async def __aenter__(self) -> "ScraperEngine":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def scrape(self, url: str, options: OptionsArg = None) -> ScrapedData:
        """Scrape *url* and return its extracted content.

        Args:
            url: Absolute http(s) URL of the page.
            options: :class:`ScrapingOptions` or a mapping of overrides
                (``timeout``, ``waitForSelector``, ``userAgent``,
                ``headless``, ``retryAttempts`` or their snake_case names).

        Raises:
            InvalidInputError: Bad URL or options; raised before any navigation.
            ScrapeFailedError: Every attempt failed.
        """
        opts = self._defaults.merge(options)
        host = validate_url(url)

        async with self._gate.slot():
            html = await retry_with_backoff(
                lambda attempt: self._fetch_html(url, host, opts, attempt),
                url=url,
                attempts=opts.retry_attempts,
                backoff=self._backoff,
            )
            data = extract_scraped_data(html, url)

        logger.info(
            "Scraped %s: %r (%d words, %d links)",
            url,
            data.title,
            data.metadata["wordCount"],
            len(data.links),
        )
        return data

    async def close(self) -> None:
        """Release the shared browser. Safe to call when none is running."""
        await self._browser.close()

    async def _fetch_html(
        self, url: str, host: str, opts: ScrapingOptions, attempt: int
    ) -> str:
        """One attempt: navigate to *url* in a fresh page and return its HTML."""
        from playwright.async_api import TimeoutError as PlaywrightTimeoutError

        await self._rate_limiter.wait(host)
        logger.debug("Attempt %d: navigating to %s", attempt, url)

        async with self._browser.page(
            user_agent=opts.user_agent,
            viewport=self._settings.viewport,
            headless=opts.headless,
        ) as page:
            try:
                await page.goto(url, wait_until="networkidle", timeout=opts.timeout)
            except PlaywrightTimeoutError as exc:
                raise NavigationTimeoutError(url, opts.timeout) from exc

            if opts.wait_for_selector:
                try:
                    await page.wait_for_selector(
                        opts.wait_for_selector, timeout=opts.timeout
                    )
                except PlaywrightTimeoutError as exc:
                    raise SelectorNotFoundError(
                        url, opts.wait_for_selector, opts.timeout
                    ) from exc

            return await page.content()
