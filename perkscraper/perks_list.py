"""Perk-list harvester: builds the dataset the enrichment loop consumes.

Pages through the NWDB perk list, reading one row per perk link, and writes
the result as ``nwdb-perks-<timestamp>.json`` together with name → URL and
name → craft mod lookup tables.
"""

from __future__ import annotations

import logging
import re
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from perkscraper.browser import browser_session
from perkscraper.config import Settings, settings
from perkscraper.dataset import Clock, isoformat_z, utcnow, write_dataset
from perkscraper.models import HarvestReport, PerkDataset, PerkRecord

if TYPE_CHECKING:
    from playwright.sync_api import Page

    from perkscraper.enricher import SessionFactory

logger = logging.getLogger(__name__)

PERK_LINK_SELECTOR = 'a[href*="/db/perk/"]'
PAGE_LINK_SELECTOR = 'a[href*="/db/perks/page/"]'
HARVEST_DATASET_NAME = "nwdb-perks"
DOCUMENT_VERSION = "1.0.0"

_PERK_ID_RE = re.compile(r"/db/perk/([^/?#]+)")
_PAGE_NUMBER_RE = re.compile(r"/page/(\d+)")


# ---------------------------------------------------------------------------
# HTML parsing
# ---------------------------------------------------------------------------

def _cell_text(cells: list[Tag], index: int) -> str:
    if len(cells) > index:
        return cells[index].get_text().strip()
    return ""


def _parse_row(link: Tag, page_url: str) -> dict[str, Any]:
    """Return description, tier, and craft mod from the row enclosing *link*."""
    row = link.find_parent("tr")
    cells: list[Tag] = row.find_all("td") if row is not None else []

    craft_mod = {"name": "", "url": ""}
    if len(cells) > 3:
        craft_link = cells[3].find("a")
        if craft_link is not None:
            craft_mod["name"] = craft_link.get_text().strip()
            craft_mod["url"] = urljoin(page_url, craft_link.get("href", ""))
        else:
            craft_mod["name"] = _cell_text(cells, 3)

    return {
        "description": _cell_text(cells, 1),
        "tier": _cell_text(cells, 2),
        "craftMod": craft_mod,
    }


def parse_perks_page(html: str, page_number: int, page_url: str) -> list[PerkRecord]:
    """Extract one record per named perk link in *html*.

    Relative hrefs are resolved against *page_url*.
    """
    soup = BeautifulSoup(html, "html.parser")
    perks: list[PerkRecord] = []
    for link in soup.select(PERK_LINK_SELECTOR):
        name = link.get_text().strip()
        if not name:
            continue
        href = urljoin(page_url, link.get("href", ""))
        match = _PERK_ID_RE.search(href)
        row = _parse_row(link, page_url)
        perks.append(
            {
                "name": name,
                "description": row["description"],
                "tier": row["tier"],
                "craftMod": row["craftMod"],
                "perkUrl": href,
                "perkId": match.group(1) if match else None,
                "pageNumber": page_number,
            }
        )
    return perks


def parse_total_pages(html: str) -> int:
    """Return the highest page number linked from *html* (at least 1)."""
    soup = BeautifulSoup(html, "html.parser")
    candidates = list(soup.select(PAGE_LINK_SELECTOR))
    candidates += [
        a for a in soup.find_all("a") if "Last" in a.get_text() or ">>" in a.get_text()
    ]

    max_page = 1
    for link in candidates:
        match = _PAGE_NUMBER_RE.search(link.get("href", ""))
        if match:
            max_page = max(max_page, int(match.group(1)))
    return max_page


# ---------------------------------------------------------------------------
# Browser-driven scraping
# ---------------------------------------------------------------------------

def _page_url(config: Settings, page_number: int) -> str:
    return f"{config.perks_base_url.rstrip('/')}/page/{page_number}"


def scrape_perks_page(
    page: "Page",
    page_number: int,
    *,
    config: Settings = settings,
    sleep: Callable[[float], None] = time.sleep,
) -> list[PerkRecord]:
    """Load list page *page_number* and parse its perks.

    A failed page is logged and yields an empty list.
    """
    url = _page_url(config, page_number)
    logger.info("Scraping page %d: %s", page_number, url)
    try:
        page.goto(url, wait_until="networkidle", timeout=config.list_timeout_ms)
        page.wait_for_selector(PERK_LINK_SELECTOR, timeout=config.list_timeout_ms)
        if config.list_render_delay_ms > 0:
            sleep(config.list_render_delay_ms / 1000)
        perks = parse_perks_page(page.content(), page_number, url)
    except Exception as exc:  # noqa: BLE001
        logger.error("Error scraping page %d: %s", page_number, exc)
        return []

    logger.info("Found %d perks on page %d", len(perks), page_number)
    return perks


def scrape_all_perks(
    page: "Page",
    *,
    config: Settings = settings,
    sleep: Callable[[float], None] = time.sleep,
) -> list[PerkRecord]:
    """Scrape page 1, discover the page count, then scrape the rest in order."""
    perks = scrape_perks_page(page, 1, config=config, sleep=sleep)

    try:
        total_pages = parse_total_pages(page.content())
    except Exception as exc:  # noqa: BLE001
        logger.error("Error getting total pages: %s", exc)
        total_pages = 1
    logger.info("Total pages found: %d", total_pages)

    for page_number in range(2, total_pages + 1):
        perks.extend(scrape_perks_page(page, page_number, config=config, sleep=sleep))
        if config.inter_page_delay_ms > 0:
            sleep(config.inter_page_delay_ms / 1000)

    logger.info("Scraping completed, total perks found: %d", len(perks))
    return perks


# ---------------------------------------------------------------------------
# Document assembly
# ---------------------------------------------------------------------------

def build_perks_document(
    perks: list[PerkRecord],
    *,
    source: str,
    clock: Clock = utcnow,
) -> PerkDataset:
    """Wrap *perks* with metadata and name-keyed lookup tables."""
    perk_urls: dict[str, str] = {}
    craft_mods: dict[str, dict[str, str]] = {}
    for perk in perks:
        if perk.get("perkUrl"):
            perk_urls[perk["name"]] = perk["perkUrl"]
        craft_mod = perk.get("craftMod") or {}
        if craft_mod.get("url"):
            craft_mods[perk["name"]] = {"name": craft_mod.get("name", ""), "url": craft_mod["url"]}

    return {
        "metadata": {
            "source": source,
            "scrapedAt": isoformat_z(clock()),
            "totalPerks": len(perks),
            "version": DOCUMENT_VERSION,
        },
        "perks": perks,
        "perkUrlMapping": perk_urls,
        "craftModMapping": craft_mods,
    }


def harvest_perks(
    output_dir: str | Path | None = None,
    *,
    config: Settings = settings,
    clock: Clock = utcnow,
    session_factory: "SessionFactory" = browser_session,
    sleep: Callable[[float], None] = time.sleep,
) -> HarvestReport:
    """Scrape the whole perk list and write it to a new timestamped file."""
    with session_factory(config) as page:
        perks = scrape_all_perks(page, config=config, sleep=sleep)

    document = build_perks_document(perks, source=config.perks_base_url, clock=clock)
    output_path = write_dataset(
        document,
        output_dir if output_dir is not None else config.output_dir,
        dataset_name=HARVEST_DATASET_NAME,
        clock=clock,
        label=None,
    )
    logger.info("Perks data saved to %s", output_path)
    return HarvestReport(output_path=output_path, total_perks=len(perks))
