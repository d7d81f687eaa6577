"""Owned headless-browser handle with scoped page acquisition.

The handle launches Playwright and a browser lazily on first use, reuses the
browser across calls, and relaunches it when it is found disconnected.
Pages are only handed out through :meth:`BrowserHandle.page`, which always
closes them on exit.  Playwright is imported lazily so that importing this
module (and the tests that fake the handle) never needs a browser install.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, AsyncIterator, Optional, Sequence

from pagesift.scraper.errors import BrowserUnavailableError, describe_error

if TYPE_CHECKING:
    from playwright.async_api import Browser, Page, Playwright

logger = logging.getLogger(__name__)

LAUNCH_ARGS: Sequence[str] = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
)


class BrowserHandle:
    """A single shared browser owned by one engine.

    Args:
        browser_type: Playwright browser name (``chromium``, ``firefox``,
            ``webkit``).
        headless: Launch mode used when no per-call value is given.
        launch_args: Extra command-line flags; only passed to Chromium.
    """

    def __init__(
        self,
        browser_type: str = "chromium",
        *,
        headless: bool = True,
        launch_args: Sequence[str] = LAUNCH_ARGS,
    ) -> None:
        self._browser_type = browser_type
        self._headless = headless
        self._launch_args = list(launch_args)
        self._playwright: Optional["Playwright"] = None
        self._browser: Optional["Browser"] = None
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def ensure(self, headless: Optional[bool] = None) -> "Browser":
        """Return the live browser, launching or relaunching it if needed.

        *headless* only matters when a launch actually happens; a running
        browser is reused as-is.

        Raises:
            BrowserUnavailableError: If Playwright or the browser fails to start.
        """
        from playwright.async_api import Error as PlaywrightError
        from playwright.async_api import async_playwright

        async with self._lock:
            if self._browser is not None:
                if self._browser.is_connected():
                    return self._browser
                logger.warning("Browser disconnected; relaunching %s", self._browser_type)
                await self._discard()

            mode = self._headless if headless is None else headless
            try:
                if self._playwright is None:
                    self._playwright = await async_playwright().start()
                launcher = getattr(self._playwright, self._browser_type)
                launch_kwargs: dict[str, Any] = {"headless": mode}
                if self._browser_type == "chromium":
                    launch_kwargs["args"] = self._launch_args
                self._browser = await launcher.launch(**launch_kwargs)
            except PlaywrightError as exc:
                await self._discard()
                raise BrowserUnavailableError(
                    f"Could not launch {self._browser_type}",
                    context={"error": describe_error(exc)},
                ) from exc

            logger.info("Launched %s (headless=%s)", self._browser_type, mode)
            return self._browser

    @asynccontextmanager
    async def page(
        self,
        *,
        user_agent: Optional[str] = None,
        viewport: Optional[dict[str, int]] = None,
        headless: Optional[bool] = None,
    ) -> AsyncIterator["Page"]:
        """Open a fresh page for the duration of the ``async with`` block."""
        from playwright.async_api import Error as PlaywrightError

        browser = await self.ensure(headless)
        try:
            page = await browser.new_page(user_agent=user_agent, viewport=viewport)
        except PlaywrightError as exc:
            raise BrowserUnavailableError(
                "Could not open a new page", context={"error": describe_error(exc)}
            ) from exc

        try:
            yield page
        finally:
            try:
                await page.close()
            except PlaywrightError:
                logger.debug("Error while closing page", exc_info=True)

    async def close(self) -> None:
        """Terminate the browser and the Playwright driver, if running."""
        async with self._lock:
            if self._browser is not None or self._playwright is not None:
                logger.info("Closing %s", self._browser_type)
            await self._discard()

    async def _discard(self) -> None:
        from playwright.async_api import Error as PlaywrightError

        browser, self._browser = self._browser, None
        playwright, self._playwright = self._playwright, None
        if browser is not None:
            try:
                await browser.close()
            except PlaywrightError:
                logger.debug("Error while closing browser", exc_info=True)
        if playwright is not None:
            try:
                await playwright.stop()
            except PlaywrightError:
                logger.debug("Error while stopping Playwright", exc_info=True)
