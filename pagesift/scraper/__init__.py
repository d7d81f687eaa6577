"""Scraper package — headless-browser fetch & content extraction."""

from pagesift.scraper.batch import BatchResult, scrape_listing, scrape_many
from pagesift.scraper.engine import ScraperEngine
from pagesift.scraper.errors import (
    BrowserUnavailableError,
    InvalidInputError,
    InvalidUrlError,
    NavigationTimeoutError,
    ScrapeFailedError,
    ScraperError,
    SelectorNotFoundError,
)
from pagesift.scraper.extractor import extract_scraped_data
from pagesift.scraper.models import ScrapedData, ScrapingOptions

__all__ = [
    "ScraperEngine",
    "ScrapedData",
    "ScrapingOptions",
    "extract_scraped_data",
    "scrape_many",
    "scrape_listing",
    "BatchResult",
    "ScraperError",
    "InvalidInputError",
    "InvalidUrlError",
    "NavigationTimeoutError",
    "SelectorNotFoundError",
    "BrowserUnavailableError",
    "ScrapeFailedError",
]
