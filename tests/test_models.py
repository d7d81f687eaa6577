"""Tests for ScrapingOptions merging and the ScrapedData record."""

from __future__ import annotations

import json
from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

import pytest

from pagesift.config import DEFAULT_USER_AGENT, Settings
from pagesift.scraper.errors import InvalidInputError
from pagesift.scraper.models import ScrapedData, ScrapingOptions, content_stats


@pytest.fixture()
def defaults() -> ScrapingOptions:
    return ScrapingOptions(
        timeout=30000, user_agent=DEFAULT_USER_AGENT, headless=True, retry_attempts=3
    )


class TestScrapingOptions:
    def test_from_settings(self) -> None:
        settings = Settings(
            scraper_timeout_ms=1234,
            scraper_headless=False,
            scraper_retry_attempts=5,
            scraper_user_agent="UA/1.0",
        )
        opts = ScrapingOptions.from_settings(settings)
        assert opts == ScrapingOptions(
            timeout=1234, user_agent="UA/1.0", headless=False, retry_attempts=5
        )

    def test_merge_none_keeps_defaults(self, defaults: ScrapingOptions) -> None:
        assert defaults.merge(None) is defaults

    def test_merge_mapping_overrides_named_keys_only(self, defaults: ScrapingOptions) -> None:
        merged = defaults.merge({"timeout": 5000, "waitForSelector": "#main"})
        assert merged.timeout == 5000
        assert merged.wait_for_selector == "#main"
        assert merged.user_agent == DEFAULT_USER_AGENT
        assert merged.retry_attempts == 3

    def test_merge_accepts_camel_and_snake_case(self, defaults: ScrapingOptions) -> None:
        merged = defaults.merge({"retryAttempts": 1, "user_agent": "Bot"})
        assert merged.retry_attempts == 1
        assert merged.user_agent == "Bot"

    def test_none_values_are_unspecified(self, defaults: ScrapingOptions) -> None:
        assert defaults.merge({"timeout": None, "headless": None}) == defaults

    def test_instance_overrides_only_fields_it_sets(self, defaults: ScrapingOptions) -> None:
        merged = defaults.merge(ScrapingOptions(timeout=10, retry_attempts=1))
        assert merged.timeout == 10
        assert merged.retry_attempts == 1
        assert merged.user_agent == DEFAULT_USER_AGENT
        assert merged.headless is True

    def test_empty_instance_keeps_defaults(self, defaults: ScrapingOptions) -> None:
        assert defaults.merge(ScrapingOptions()) == defaults

    def test_unknown_key_rejected(self, defaults: ScrapingOptions) -> None:
        with pytest.raises(InvalidInputError, match="bogus"):
            defaults.merge({"bogus": True})

    @pytest.mark.parametrize(
        "overrides",
        [
            {"timeout": 0},
            {"timeout": -5},
            {"retryAttempts": 0},
            {"timeout": "fast"},
            {"timeout": True},
            {"retryAttempts": False},
        ],
    )
    def test_invalid_values_rejected(
        self, defaults: ScrapingOptions, overrides: dict
    ) -> None:
        with pytest.raises(InvalidInputError):
            defaults.merge(overrides)

    def test_input_errors_are_value_errors(self, defaults: ScrapingOptions) -> None:
        with pytest.raises(ValueError):
            defaults.merge({"retry_attempts": -1})


class TestScrapedData:
    def test_is_immutable(self) -> None:
        data = ScrapedData(title="T", content="c")
        with pytest.raises(FrozenInstanceError):
            data.title = "other"  # type: ignore[misc]

    def test_to_dict_is_json_serialisable(self) -> None:
        when = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        data = ScrapedData(
            title="T",
            content="one two",
            published_at=when,
            tags=("a",),
            links=("https://x.com/",),
            metadata={"scrapedAt": when, "wordCount": 2, "readingTime": 1},
        )
        payload = json.loads(json.dumps(data.to_dict()))
        assert payload["published_at"] == "2024-01-02T03:04:05+00:00"
        assert payload["metadata"]["scrapedAt"] == "2024-01-02T03:04:05+00:00"
        assert payload["tags"] == ["a"]
        assert payload["author"] is None


class TestContentStats:
    @pytest.mark.parametrize(
        ("content", "words", "minutes"),
        [("", 0, 0), ("one", 1, 1), ("w " * 200, 200, 1), ("w " * 201, 201, 2)],
    )
    def test_counts(self, content: str, words: int, minutes: int) -> None:
        assert content_stats(content) == {"wordCount": words, "readingTime": minutes}
