"""Content extraction: turns rendered HTML into a :class:`ScrapedData`.

Every field is produced by an ordered tuple of *candidates*, small functions
``(soup) -> value | None`` tried left to right; the first non-empty value
wins.  The body extractor works on a copy of the document so that removing
page chrome never hides anything from the other extractors.
"""

from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, List, Optional, Sequence

import httpx
from bs4 import BeautifulSoup, Tag
from dateutil import parser as date_parser

from pagesift.scraper.errors import InvalidUrlError
from pagesift.scraper.models import ScrapedData, content_stats
from pagesift.scraper.sanitizer import sanitize_content, sanitize_html
from pagesift.scraper.urls import parse_http_url

Candidate = Callable[[BeautifulSoup], Optional[str]]

UNTITLED = "Untitled"
MAX_TAGS = 10
MAX_LINKS = 50


# ---------------------------------------------------------------------------
# Candidate helpers
# ---------------------------------------------------------------------------

def _text(element: Tag) -> str:
    """Return the element's text with whitespace collapsed."""
    return " ".join(element.get_text(" ").split())


def _select(selector: str, *attrs: str) -> Candidate:
    """Build a candidate reading the first element matching *selector*.

    The first non-empty attribute among *attrs* wins, then the element text.
    """

    def candidate(soup: BeautifulSoup) -> Optional[str]:
        element = soup.select_one(selector)
        if element is None:
            return None
        for attr in attrs:
            value = element.get(attr)
            if isinstance(value, str) and value.strip():
                return value.strip()
        return _text(element) or None

    candidate.__name__ = f"select({selector!r})"
    return candidate


def _first(candidates: Iterable[Candidate], soup: BeautifulSoup) -> Optional[str]:
    for candidate in candidates:
        value = candidate(soup)
        if value:
            return value
    return None


# ---------------------------------------------------------------------------
# Candidate chains
# ---------------------------------------------------------------------------

TITLE_CANDIDATES: Sequence[Candidate] = (
    _select("title", "content"),
    _select("h1", "content"),
    _select('[property="og:title"]', "content"),
    _select('[name="title"]', "content"),
    _select(".title", "content"),
    _select(".headline", "content"),
)

AUTHOR_CANDIDATES: Sequence[Candidate] = (
    _select('[rel="author"]', "content"),
    _select(".author", "content"),
    _select(".byline", "content"),
    _select('[property="article:author"]', "content"),
    _select('[name="author"]', "content"),
)

DATE_CANDIDATES: Sequence[Candidate] = (
    _select('[property="article:published_time"]', "datetime", "content"),
    _select('[property="og:published_time"]', "datetime", "content"),
    _select("time[datetime]", "datetime", "content"),
    _select(".published", "datetime", "content"),
    _select(".date", "datetime", "content"),
)

BODY_CANDIDATES: Sequence[Candidate] = (
    _select("article"),
    _select(".content"),
    _select(".post"),
    _select(".entry"),
    _select('[role="main"]'),
    _select("main"),
)

NON_CONTENT_SELECTOR = (
    "script, style, nav, header, footer, aside, .ad, .advertisement, .sidebar"
)
TAG_SELECTORS = (".tag", ".category", '[rel="tag"]', ".label")


# ---------------------------------------------------------------------------
# Field extractors
# ---------------------------------------------------------------------------

def extract_title(soup: BeautifulSoup) -> str:
    return _first(TITLE_CANDIDATES, soup) or UNTITLED


def extract_author(soup: BeautifulSoup) -> Optional[str]:
    return _first(AUTHOR_CANDIDATES, soup)


# Two fill-in dates that differ in every calendar field: a value whose parse
# changes between them was missing its year, month or day.
_DATE_FILLS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def _parse_full_date(value: str) -> Optional[datetime]:
    """Parse *value*, or return None unless it names a complete calendar date."""
    try:
        first, second = (date_parser.parse(value, default=fill) for fill in _DATE_FILLS)
    except (ValueError, OverflowError):
        return None
    if first.date() != second.date():
        return None
    return first


def extract_published_date(soup: BeautifulSoup) -> Optional[datetime]:
    """Return the first candidate value that parses as a complete date.

    Partial values such as a weekday or a bare day number are skipped rather
    than completed from today's date.
    """
    for candidate in DATE_CANDIDATES:
        value = candidate(soup)
        if not value:
            continue
        parsed = _parse_full_date(value)
        if parsed is not None:
            return parsed
    return None


def extract_text(soup: BeautifulSoup) -> str:
    """Return sanitized main-body text.

    Page chrome is removed from a working copy, then the first content
    container with text wins; the whole body is the fallback.
    """
    working = copy.copy(soup)
    for element in working.select(NON_CONTENT_SELECTOR):
        element.decompose()

    text = _first(BODY_CANDIDATES, working)
    if not text:
        root = working.body or working
        text = root.get_text(" ")
    return sanitize_content(text)


def extract_tags(soup: BeautifulSoup) -> List[str]:
    tags: List[str] = []
    for selector in TAG_SELECTORS:
        for element in soup.select(selector):
            tag = _text(element)
            if tag and tag not in tags:
                tags.append(tag)
    return tags[:MAX_TAGS]


def extract_links(soup: BeautifulSoup, base_url: str) -> List[str]:
    """Return absolute http(s) links, deduplicated in first-seen order.

    Hrefs are resolved against *base_url*; anything carrying a fragment or
    using another scheme (``mailto:``, ``javascript:`` ...) is dropped, as is
    anything with a malformed host or port.
    """
    base = httpx.URL(base_url)
    seen: set[str] = set()
    links: List[str] = []
    for anchor in soup.select("a[href]"):
        href = anchor.get("href")
        if not isinstance(href, str) or not href.strip() or "#" in href:
            continue
        try:
            absolute = parse_http_url(base.join(href.strip()))
        except (httpx.InvalidURL, InvalidUrlError):
            continue
        link = str(absolute)
        if link not in seen:
            seen.add(link)
            links.append(link)
    return links[:MAX_LINKS]


def extract_metadata(soup: BeautifulSoup) -> dict[str, Any]:
    """Collect Open Graph, Twitter Card and standard meta tags.

    Prefixed keys are stored without their ``og:`` / ``twitter:`` prefix.
    """
    metadata: dict[str, Any] = {}

    for prefix, attr in (("og:", "property"), ("twitter:", "name")):
        for meta in soup.select(f'meta[{attr}^="{prefix}"]'):
            key = meta.get(attr, "")[len(prefix):]
            content = meta.get("content")
            if key and content:
                metadata[key] = content

    for name in ("description", "author"):
        meta = soup.select_one(f'meta[name="{name}"]')
        if meta is not None and meta.get("content"):
            metadata[name] = meta["content"]

    keywords = soup.select_one('meta[name="keywords"]')
    if keywords is not None and keywords.get("content"):
        metadata["keywords"] = [
            word.strip() for word in keywords["content"].split(",") if word.strip()
        ]

    return metadata


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_scraped_data(
    html: str, url: str, *, scraped_at: Optional[datetime] = None
) -> ScrapedData:
    """Sanitize *html* once and run the full extraction chain over it.

    Args:
        html: Rendered page HTML.
        url: The page URL, used to resolve relative links.
        scraped_at: Timestamp recorded as ``metadata["scrapedAt"]``;
            defaults to now (UTC).
    """
    soup = BeautifulSoup(sanitize_html(html), "html.parser")

    content = extract_text(soup)
    metadata = extract_metadata(soup)
    metadata["scrapedAt"] = scraped_at or datetime.now(timezone.utc)
    metadata.update(content_stats(content))

    return ScrapedData(
        title=extract_title(soup),
        content=content,
        author=extract_author(soup),
        published_at=extract_published_date(soup),
        tags=tuple(extract_tags(soup)),
        links=tuple(extract_links(soup, url)),
        metadata=metadata,
    )
