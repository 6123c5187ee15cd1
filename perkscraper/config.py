"""Centralised settings for the perk scraper.

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

_DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------
    output_dir: Path = field(
        default_factory=lambda: Path(os.environ.get("PERKSCRAPER_OUTPUT_DIR", "output"))
    )
    dataset_name: str | None = field(
        default_factory=lambda: os.environ.get("PERKSCRAPER_DATASET_NAME") or None
    )

    # ------------------------------------------------------------------
    # Browser
    # ------------------------------------------------------------------
    headless: bool = field(
        default_factory=lambda: _env_bool("PERKSCRAPER_HEADLESS", "true")
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get("PERKSCRAPER_USER_AGENT", _DEFAULT_USER_AGENT)
    )
    viewport_width: int = field(
        default_factory=lambda: int(os.environ.get("PERKSCRAPER_VIEWPORT_WIDTH", "1920"))
    )
    viewport_height: int = field(
        default_factory=lambda: int(os.environ.get("PERKSCRAPER_VIEWPORT_HEIGHT", "1080"))
    )

    # ------------------------------------------------------------------
    # Enrichment pacing (milliseconds)
    # ------------------------------------------------------------------
    navigation_timeout_ms: int = field(
        default_factory=lambda: int(os.environ.get("NAVIGATION_TIMEOUT_MS", "20000"))
    )
    selector_wait_timeout_ms: int = field(
        default_factory=lambda: int(os.environ.get("SELECTOR_WAIT_TIMEOUT_MS", "10000"))
    )
    settle_delay_ms: int = field(
        default_factory=lambda: int(os.environ.get("SETTLE_DELAY_MS", "1000"))
    )
    inter_record_delay_ms: int = field(
        default_factory=lambda: int(os.environ.get("INTER_RECORD_DELAY_MS", "500"))
    )

    # ------------------------------------------------------------------
    # Perk-list harvester
    # ------------------------------------------------------------------
    perks_base_url: str = field(
        default_factory=lambda: os.environ.get(
            "NWDB_PERKS_BASE_URL", "https://nwdb.info/db/perks"
        )
    )
    list_timeout_ms: int = field(
        default_factory=lambda: int(os.environ.get("LIST_TIMEOUT_MS", "30000"))
    )
    list_render_delay_ms: int = field(
        default_factory=lambda: int(os.environ.get("LIST_RENDER_DELAY_MS", "3000"))
    )
    inter_page_delay_ms: int = field(
        default_factory=lambda: int(os.environ.get("INTER_PAGE_DELAY_MS", "1000"))
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO").upper()
    )


# Module-level singleton — import this everywhere:
#   from perkscraper.config import settings
settings = Settings()
