"""Data models for the scraper pipeline."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from typing import Any, Mapping, Optional, Tuple, Union

from pagesift.config import Settings
from pagesift.scraper.errors import InvalidInputError

WORDS_PER_MINUTE = 200

# camelCase keys accepted alongside the field names in option mappings
_OPTION_ALIASES = {
    "waitForSelector": "wait_for_selector",
    "userAgent": "user_agent",
    "retryAttempts": "retry_attempts",
}


@dataclass(frozen=True)
class ScrapingOptions:
    """Per-call knobs for :meth:`ScraperEngine.scrape`.

    ``timeout`` is in milliseconds and bounds both navigation and the
    optional selector wait of each attempt.  A field left as ``None`` is
    unspecified and takes the configured default when merged.
    """

    timeout: Optional[int] = None
    wait_for_selector: Optional[str] = None
    user_agent: Optional[str] = None
    headless: Optional[bool] = None
    retry_attempts: Optional[int] = None

    def __post_init__(self) -> None:
        if self.timeout is not None and not _is_int(self.timeout, minimum=1):
            raise InvalidInputError(f"timeout must be a positive integer, got {self.timeout!r}")
        if self.retry_attempts is not None and not _is_int(self.retry_attempts, minimum=1):
            raise InvalidInputError(
                f"retry_attempts must be at least 1, got {self.retry_attempts!r}"
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> "ScrapingOptions":
        return cls(
            timeout=settings.scraper_timeout_ms,
            user_agent=settings.scraper_user_agent,
            headless=settings.scraper_headless,
            retry_attempts=settings.scraper_retry_attempts,
        )

    def merge(
        self, overrides: Union["ScrapingOptions", Mapping[str, Any], None]
    ) -> "ScrapingOptions":
        """Return these defaults with *overrides* applied.

        Only the fields an options instance sets, or the keys a mapping
        names, are overridden; ``None`` values count as unspecified.

        Raises:
            InvalidInputError: For unknown keys or out-of-range values.
        """
        if overrides is None:
            return self
        if isinstance(overrides, ScrapingOptions):
            overrides = {f.name: getattr(overrides, f.name) for f in fields(overrides)}

        known = {f.name for f in fields(self)}
        changes: dict[str, Any] = {}
        for key, value in overrides.items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in known:
                raise InvalidInputError(f"Unknown scraping option: {key!r}")
            if value is not None:
                changes[name] = value
        return replace(self, **changes)


@dataclass(frozen=True)
class ScrapedData:
    """Normalized result of one successful scrape.

    ``metadata`` always carries ``scrapedAt``, ``wordCount`` and
    ``readingTime``; see :func:`content_stats`.
    """

    title: str
    content: str
    author: Optional[str] = None
    published_at: Optional[datetime] = None
    tags: Tuple[str, ...] = ()
    links: Tuple[str, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable representation of the record."""
        return {
            "title": self.title,
            "content": self.content,
            "author": self.author,
            "published_at": _iso(self.published_at),
            "tags": list(self.tags),
            "links": list(self.links),
            "metadata": {key: _iso(value) for key, value in self.metadata.items()},
        }


def content_stats(content: str) -> dict[str, int]:
    """Return ``wordCount`` and ``readingTime`` (minutes, rounded up) for *content*."""
    word_count = len(content.split())
    return {
        "wordCount": word_count,
        "readingTime": math.ceil(word_count / WORDS_PER_MINUTE),
    }


def _iso(value: Any) -> Any:
    return value.isoformat() if isinstance(value, datetime) else value


def _is_int(value: Any, *, minimum: int) -> bool:
    # bool is an int subclass but never a valid count
    return isinstance(value, int) and not isinstance(value, bool) and value >= minimum
