"""Exception types raised by the scraper engine.

Only :class:`InvalidInputError` and :class:`ScrapeFailedError` ever reach a
caller of :meth:`~pagesift.scraper.engine.ScraperEngine.scrape`; the other
kinds are raised inside a single attempt and absorbed by the retry loop.
"""

from __future__ import annotations

from typing import Any


class ScraperError(Exception):
    """Base class for every scraper failure.

    Args:
        message: Human-readable description of what went wrong.
        url: The URL being scraped, when known.
        context: Optional extra details (selector, timeout, attempts ...).
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.url = url
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]
        if self.url:
            parts.append(f"URL: {self.url}")
        for key, value in self.context.items():
            parts.append(f"{key}: {value}")
        return " | ".join(parts)


class InvalidInputError(ScraperError, ValueError):
    """Raised for bad caller input. Never retried."""


class InvalidUrlError(InvalidInputError):
    """Raised when the target is not an absolute http(s) URL."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Invalid URL: {reason}", url=url)


class NavigationTimeoutError(ScraperError):
    """Page navigation did not reach network idle within the timeout."""

    def __init__(self, url: str, timeout_ms: int) -> None:
        super().__init__(
            "Navigation timed out", url=url, context={"timeout_ms": timeout_ms}
        )


class SelectorNotFoundError(ScraperError):
    """The requested wait-selector never appeared on the page."""

    def __init__(self, url: str, selector: str, timeout_ms: int) -> None:
        self.selector = selector
        super().__init__(
            "Selector not found",
            url=url,
            context={"selector": selector, "timeout_ms": timeout_ms},
        )


class BrowserUnavailableError(ScraperError):
    """The shared browser could not be launched or has crashed."""


class ScrapeFailedError(ScraperError):
    """Terminal failure after every configured attempt failed.

    Attributes:
        attempts: Number of attempts made.
        cause: The exception raised by the final attempt.
    """

    def __init__(self, url: str, attempts: int, cause: BaseException) -> None:
        self.attempts = attempts
        self.cause = cause
        super().__init__(
            f"Failed to scrape after {attempts} attempt(s)",
            url=url,
            context={"last_error": describe_error(cause)},
        )


def describe_error(exc: BaseException) -> str:
    """Return a one-line summary of *exc* suitable for error contexts."""
    if isinstance(exc, ScraperError):
        details = ", ".join(f"{key}={value}" for key, value in exc.context.items())
        return f"{exc.message} ({details})" if details else exc.message
    text = str(exc).strip().splitlines()
    return f"{type(exc).__name__}: {text[0]}" if text else type(exc).__name__
