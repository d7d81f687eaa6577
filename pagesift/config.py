"""Centralised settings for pagesift.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Per-request defaults (overridable through ScrapingOptions)
    # ------------------------------------------------------------------
    scraper_timeout_ms: int = field(
        default_factory=lambda: int(os.environ.get("SCRAPER_TIMEOUT_MS", "30000"))
    )
    scraper_headless: bool = field(
        default_factory=lambda: _env_bool("SCRAPER_HEADLESS", "true")
    )
    scraper_retry_attempts: int = field(
        default_factory=lambda: int(os.environ.get("SCRAPER_RETRY_ATTEMPTS", "3"))
    )
    scraper_user_agent: str = field(
        default_factory=lambda: os.environ.get("SCRAPER_USER_AGENT", DEFAULT_USER_AGENT)
    )

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------
    scraper_retry_delay: float = field(
        default_factory=lambda: float(os.environ.get("SCRAPER_RETRY_DELAY", "1.0"))
    )
    scraper_max_concurrent: int = field(
        default_factory=lambda: int(os.environ.get("SCRAPER_MAX_CONCURRENT", "5"))
    )
    scraper_domain_interval: float = field(
        default_factory=lambda: float(os.environ.get("SCRAPER_DOMAIN_INTERVAL", "1.0"))
    )

    # ------------------------------------------------------------------
    # Browser
    # ------------------------------------------------------------------
    scraper_browser: str = field(
        default_factory=lambda: os.environ.get("SCRAPER_BROWSER", "chromium")
    )
    scraper_viewport_width: int = field(
        default_factory=lambda: int(os.environ.get("SCRAPER_VIEWPORT_WIDTH", "1366"))
    )
    scraper_viewport_height: int = field(
        default_factory=lambda: int(os.environ.get("SCRAPER_VIEWPORT_HEIGHT", "768"))
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO").upper()
    )

    @property
    def viewport(self) -> dict[str, int]:
        """Viewport size passed to every new browser page."""
        return {
            "width": self.scraper_viewport_width,
            "height": self.scraper_viewport_height,
        }


# Module-level singleton, import this everywhere:
#   from pagesift.config import settings
settings = Settings()
