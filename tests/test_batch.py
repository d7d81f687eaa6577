"""Tests for the batch helpers (scrape_many / scrape_listing).

A ``FakeEngine`` stands in for ScraperEngine: it returns canned ScrapedData
per URL, raises for URLs listed as failing, and records every call.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import pytest

from pagesift.scraper.batch import BatchResult, scrape_listing, scrape_many
from pagesift.scraper.errors import NavigationTimeoutError, ScrapeFailedError
from pagesift.scraper.models import ScrapedData


def _data(title: str, links: Iterable[str] = ()) -> ScrapedData:
    return ScrapedData(
        title=title,
        content=f"{title} body",
        links=tuple(links),
        metadata={"wordCount": 2, "readingTime": 1},
    )


class FakeEngine:
    def __init__(
        self,
        pages: Optional[Dict[str, ScrapedData]] = None,
        failing: Iterable[str] = (),
    ) -> None:
        self._pages = pages or {}
        self._failing = set(failing)
        self.calls: List[tuple[str, Any]] = []

    async def scrape(self, url: str, options: Any = None) -> ScrapedData:
        self.calls.append((url, options))
        if url in self._failing:
            raise ScrapeFailedError(url, 3, NavigationTimeoutError(url, 30000))
        return self._pages.get(url) or _data(url)


# ---------------------------------------------------------------------------
# scrape_many
# ---------------------------------------------------------------------------


class TestScrapeMany:
    async def test_scrapes_every_url(self) -> None:
        engine = FakeEngine()
        urls = ["https://a.com/1", "https://a.com/2"]

        result = await scrape_many(engine, urls)  # type: ignore[arg-type]

        assert isinstance(result, BatchResult)
        assert list(result.scraped) == urls
        assert result.scraped_count == 2
        assert result.failed == {}

    async def test_duplicates_scraped_once(self) -> None:
        engine = FakeEngine()

        result = await scrape_many(
            engine, ["https://a.com/1", "https://a.com/1"]  # type: ignore[arg-type]
        )

        assert [url for url, _ in engine.calls] == ["https://a.com/1"]
        assert result.scraped_count == 1

    async def test_skip_list_is_not_fetched(self) -> None:
        engine = FakeEngine()

        result = await scrape_many(
            engine,  # type: ignore[arg-type]
            ["https://a.com/1", "https://a.com/2"],
            skip={"https://a.com/1"},
        )

        assert result.skipped == ["https://a.com/1"]
        assert result.skipped_count == 1
        assert [url for url, _ in engine.calls] == ["https://a.com/2"]

    async def test_failures_recorded_and_batch_continues(self) -> None:
        engine = FakeEngine(failing={"https://a.com/bad"})

        result = await scrape_many(
            engine,  # type: ignore[arg-type]
            ["https://a.com/ok", "https://a.com/bad", "https://a.com/also-ok"],
        )

        assert set(result.scraped) == {"https://a.com/ok", "https://a.com/also-ok"}
        assert list(result.failed) == ["https://a.com/bad"]
        assert "Failed to scrape after 3 attempt(s)" in result.failed["https://a.com/bad"]

    async def test_options_forwarded(self) -> None:
        engine = FakeEngine()

        await scrape_many(
            engine, ["https://a.com/1"], {"timeout": 1000}  # type: ignore[arg-type]
        )

        assert engine.calls == [("https://a.com/1", {"timeout": 1000})]

    async def test_empty_input(self) -> None:
        result = await scrape_many(FakeEngine(), [])  # type: ignore[arg-type]
        assert result == BatchResult()


# ---------------------------------------------------------------------------
# scrape_listing
# ---------------------------------------------------------------------------


class TestScrapeListing:
    _LISTING = "https://blog.com/"

    def _engine(self, **kwargs: Any) -> FakeEngine:
        listing = _data(
            "Blog",
            links=[
                "https://blog.com/about",
                "https://blog.com/posts/one",
                "https://blog.com/posts/two",
                "https://other.com/posts/elsewhere",
                "https://blog.com/posts/three",
            ],
        )
        return FakeEngine(pages={self._LISTING: listing}, **kwargs)

    async def test_follows_matching_links_in_order(self) -> None:
        engine = self._engine()

        result = await scrape_listing(engine, self._LISTING, "/posts/")  # type: ignore[arg-type]

        assert list(result.scraped) == [
            "https://blog.com/posts/one",
            "https://blog.com/posts/two",
            "https://other.com/posts/elsewhere",
            "https://blog.com/posts/three",
        ]
        assert engine.calls[0][0] == self._LISTING

    async def test_max_posts_caps_links(self) -> None:
        engine = self._engine()

        result = await scrape_listing(
            engine, self._LISTING, "blog.com/posts/", max_posts=2  # type: ignore[arg-type]
        )

        assert list(result.scraped) == [
            "https://blog.com/posts/one",
            "https://blog.com/posts/two",
        ]

    async def test_skip_and_failures_apply_to_posts(self) -> None:
        engine = self._engine(failing={"https://blog.com/posts/two"})

        result = await scrape_listing(
            engine,  # type: ignore[arg-type]
            self._LISTING,
            "blog.com/posts/",
            skip={"https://blog.com/posts/one"},
        )

        assert result.skipped == ["https://blog.com/posts/one"]
        assert list(result.failed) == ["https://blog.com/posts/two"]
        assert list(result.scraped) == ["https://blog.com/posts/three"]

    async def test_listing_failure_propagates(self) -> None:
        engine = FakeEngine(failing={self._LISTING})

        with pytest.raises(ScrapeFailedError):
            await scrape_listing(engine, self._LISTING, "/posts/")  # type: ignore[arg-type]
