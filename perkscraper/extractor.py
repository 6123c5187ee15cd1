"""Craft Mod extraction: turns a perk detail page into an :class:`ExtractionResult`.

The lookup is a short chain over the parsed DOM.  Each step returns the next
node or ``None``; the first ``None`` ends the chain with ``value=None``:

    "Craft Mod" header → next-sibling panel → item link → item-name span
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from bs4 import BeautifulSoup, Tag
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from perkscraper.errors import SelectorTimeoutError
from perkscraper.models import ExtractionResult

if TYPE_CHECKING:
    from playwright.sync_api import Page

STATS_CONTAINER_SELECTOR = ".stats-container"
HEADER_SELECTOR = "span.container-sub-panel-header"
HEADER_LABEL = "Craft Mod"
PANEL_CLASS = "container-sub-panel"
ITEM_LINK_SELECTOR = 'a[href^="/db/item/"]'
ITEM_NAME_SELECTOR = "span.table-item-name"

DEFAULT_SELECTOR_TIMEOUT_MS = 10_000


# ---------------------------------------------------------------------------
# Lookup steps
# ---------------------------------------------------------------------------

def find_craft_mod_header(soup: BeautifulSoup | Tag, debug: dict[str, Any]) -> Tag | None:
    """Return the first header whose trimmed text is exactly ``Craft Mod``."""
    header = next(
        (el for el in soup.select(HEADER_SELECTOR) if el.get_text().strip() == HEADER_LABEL),
        None,
    )
    debug["craftModHeaderFound"] = header is not None
    return header


def find_craft_mod_panel(header: Tag, debug: dict[str, Any]) -> Tag | None:
    """Return the header's next sibling element if it is a sub-panel."""
    panel = header.find_next_sibling()
    debug["panelFound"] = panel is not None
    if panel is None:
        debug["panelClass"] = None
        return None

    classes = panel.get("class") or []
    debug["panelClass"] = " ".join(classes)
    if PANEL_CLASS not in classes:
        return None
    return panel


def find_item_link(panel: Tag, debug: dict[str, Any]) -> Tag | None:
    link = panel.select_one(ITEM_LINK_SELECTOR)
    debug["itemLinkFound"] = link is not None
    debug["itemLinkHref"] = link.get("href") if link is not None else None
    return link


def find_item_name(link: Tag, debug: dict[str, Any]) -> str | None:
    """Return the trimmed item name inside *link*, or ``None``."""
    span = link.select_one(ITEM_NAME_SELECTOR)
    text = span.get_text().strip() if span is not None else None
    debug["itemSpanFound"] = span is not None
    debug["itemSpanText"] = text
    return text or None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_from_html(html: str) -> ExtractionResult:
    """Run the Craft Mod lookup chain against *html*.

    A missing node at any step is a normal outcome and yields ``value=None``.
    """
    soup = BeautifulSoup(html, "html.parser")
    debug: dict[str, Any] = {}

    header = find_craft_mod_header(soup, debug)
    if header is None:
        return ExtractionResult(value=None, debug=debug)

    panel = find_craft_mod_panel(header, debug)
    if panel is None:
        return ExtractionResult(value=None, debug=debug)

    link = find_item_link(panel, debug)
    if link is None:
        return ExtractionResult(value=None, debug=debug)

    return ExtractionResult(value=find_item_name(link, debug), debug=debug)


def extract_craft_mod_item(
    page: "Page",
    timeout_ms: int = DEFAULT_SELECTOR_TIMEOUT_MS,
) -> ExtractionResult:
    """Wait for the stats container on *page*, then extract the Craft Mod item.

    Raises:
        SelectorTimeoutError: If the stats container never appears.
    """
    try:
        page.wait_for_selector(STATS_CONTAINER_SELECTOR, timeout=timeout_ms)
    except PlaywrightTimeoutError as exc:
        raise SelectorTimeoutError(
            f"{STATS_CONTAINER_SELECTOR!r} did not appear within {timeout_ms} ms"
        ) from exc
    return extract_from_html(page.content())
