"""pagesift CLI — entry-point for scraping operations.

Usage:
    python cli/main.py --help

Commands:
    scrape   → scrape one URL and print the extracted record
    batch    → scrape every URL listed in a file
    listing  → scrape a listing page and the posts it links to
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from pagesift.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any working
# directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import asyncio
import logging
from typing import Any, Dict, List, Optional

import typer

from cli.rendering import batch_to_json, render_batch, render_summary, to_json
from pagesift.config import settings
from pagesift.scraper import ScraperEngine, ScraperError, scrape_listing, scrape_many

app = typer.Typer(
    name="pagesift",
    help="pagesift — headless-browser content scraper.",
    no_args_is_help=True,
)


@app.callback()
def main(
    log_level: str = typer.Option(
        settings.log_level, "--log-level", help="Logging level (DEBUG, INFO, WARNING …)."
    ),
) -> None:
    """Configure logging before any command runs."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _options(
    timeout: Optional[int],
    wait_for: Optional[str],
    user_agent: Optional[str],
    headful: bool,
    retries: Optional[int],
) -> Dict[str, Any]:
    """Collect CLI flags into an options mapping; unset flags keep defaults."""
    return {
        "timeout": timeout,
        "wait_for_selector": wait_for,
        "user_agent": user_agent,
        "headless": False if headful else None,
        "retry_attempts": retries,
    }


def _read_urls(path: Path) -> List[str]:
    """Return the non-blank, non-comment lines of *path*."""
    urls: List[str] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            urls.append(line)
    return urls


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command("scrape")
def scrape(
    url: str = typer.Option(..., help="URL to scrape."),
    timeout: Optional[int] = typer.Option(None, help="Per-attempt timeout in ms."),
    wait_for: Optional[str] = typer.Option(None, "--wait-for", help="CSS selector to wait for."),
    user_agent: Optional[str] = typer.Option(None, help="User-agent override."),
    headful: bool = typer.Option(False, "--headful", help="Launch a visible browser."),
    retries: Optional[int] = typer.Option(None, help="Number of attempts."),
    as_json: bool = typer.Option(False, "--json", help="Print the full record as JSON."),
) -> None:
    """Scrape a URL and print the extracted record to stdout."""
    options = _options(timeout, wait_for, user_agent, headful, retries)

    async def _run():
        async with ScraperEngine() as engine:
            return await engine.scrape(url, options)

    try:
        data = asyncio.run(_run())
    except ScraperError as exc:
        typer.echo(f"[scrape] ✗ {exc}", err=True)
        raise typer.Exit(1) from exc

    typer.echo(to_json(data) if as_json else render_summary(url, data))


@app.command("batch")
def batch(
    file: Path = typer.Option(..., exists=True, dir_okay=False, help="File with one URL per line."),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON."),
) -> None:
    """Scrape every URL listed in FILE, continuing past failures."""
    urls = _read_urls(file)
    if not urls:
        typer.echo(f"[batch] No URLs found in {file}.")
        raise typer.Exit(1)

    async def _run():
        async with ScraperEngine() as engine:
            return await scrape_many(engine, urls)

    try:
        result = asyncio.run(_run())
    except ScraperError as exc:
        typer.echo(f"[batch] ✗ {exc}", err=True)
        raise typer.Exit(1) from exc

    typer.echo(batch_to_json(result) if as_json else render_batch(result))
    if result.failed and not result.scraped:
        raise typer.Exit(1)


@app.command("listing")
def listing(
    url: str = typer.Option(..., help="Listing (blog index) page URL."),
    pattern: str = typer.Option(..., help="Substring a post URL must contain."),
    max_posts: int = typer.Option(10, min=1, help="Maximum posts to follow."),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON."),
) -> None:
    """Scrape a listing page, then the posts it links to."""

    async def _run():
        async with ScraperEngine() as engine:
            return await scrape_listing(engine, url, pattern, max_posts=max_posts)

    try:
        result = asyncio.run(_run())
    except ScraperError as exc:
        typer.echo(f"[listing] ✗ {exc}", err=True)
        raise typer.Exit(1) from exc

    typer.echo(batch_to_json(result) if as_json else render_batch(result))


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
