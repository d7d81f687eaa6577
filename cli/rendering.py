"""Utilities for rendering scrape results in the CLI."""

from __future__ import annotations

import json
from typing import List

from pagesift.scraper import BatchResult, ScrapedData


def render_summary(url: str, data: ScrapedData, *, with_content: bool = True) -> str:
    """Render *data* as the human-readable block printed by ``scrape``.

    Args:
        url: The scraped URL, shown in the header line.
        data: The scrape result.
        with_content: Append the body text after a blank line.

    Returns:
        The block as a single string (no trailing newline).
    """
    lines: List[str] = [
        f"[scrape] URL    : {url}",
        f"[scrape] Title  : {data.title}",
        f"[scrape] Author : {data.author or '(none)'}",
        f"[scrape] Date   : {data.published_at.isoformat() if data.published_at else '(none)'}",
        f"[scrape] Tags   : {', '.join(data.tags) or '(none)'}",
        f"[scrape] Words  : {data.metadata['wordCount']}"
        f"  (~{data.metadata['readingTime']} min read)",
        f"[scrape] Links  : {len(data.links)}",
    ]
    if with_content:
        lines.append("")
        lines.append(data.content)
    return "\n".join(lines)


def render_batch(result: BatchResult) -> str:
    """Render one line per URL followed by a totals line."""
    lines: List[str] = []
    for url, data in result.scraped.items():
        lines.append(f"✓ {url}  {data.title!r} ({data.metadata['wordCount']} words)")
    for url in result.skipped:
        lines.append(f"- {url}  (skipped)")
    for url, error in result.failed.items():
        lines.append(f"✗ {url}  {error}")
    lines.append(
        f"[batch] {result.scraped_count} scraped, "
        f"{result.skipped_count} skipped, {len(result.failed)} failed"
    )
    return "\n".join(lines)


def to_json(data: ScrapedData) -> str:
    return json.dumps(data.to_dict(), indent=2, ensure_ascii=False)


def batch_to_json(result: BatchResult) -> str:
    return json.dumps(
        {
            "scraped": {url: data.to_dict() for url, data in result.scraped.items()},
            "skipped": result.skipped,
            "failed": result.failed,
        },
        indent=2,
        ensure_ascii=False,
    )
