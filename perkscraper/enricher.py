"""Craft Mod enrichment pipeline.

``enrich_file`` orchestrates a full run from an input dataset to a new,
enriched output file:

    load dataset → open browser → visit each perk page in order →
    extract Craft Mod item → close browser → write timestamped copy
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING, Callable, ContextManager

from perkscraper.browser import browser_session
from perkscraper.config import Settings, settings
from perkscraper.dataset import Clock, derive_dataset_name, load_dataset, utcnow, write_dataset
from perkscraper.extractor import extract_craft_mod_item
from perkscraper.models import EnrichmentReport, PerkDataset, PerkRecord, RunCounters

if TYPE_CHECKING:
    from playwright.sync_api import Page

logger = logging.getLogger(__name__)

SessionFactory = Callable[[Settings], ContextManager["Page"]]


def _pause(sleep: Callable[[float], None], delay_ms: int) -> None:
    if delay_ms > 0:
        sleep(delay_ms / 1000)


def process_record(
    page: "Page",
    record: PerkRecord,
    counters: RunCounters,
    *,
    config: Settings = settings,
    sleep: Callable[[float], None] = time.sleep,
    index: int = 1,
    total: int = 1,
) -> PerkRecord:
    """Visit *record*'s ``perkUrl`` and set its ``craftModItem``.

    Records without a ``perkUrl`` are returned untouched and not counted.
    Every other record ends with ``craftModItem`` set (to ``None`` when the
    page has no Craft Mod item or the visit failed) and exactly one counter
    incremented.  Per-record errors are logged, never raised.
    """
    url = record.get("perkUrl")
    if not url:
        return record

    logger.info("[%d/%d] %s", index, total, record.get("name"))
    logger.info("  URL: %s", url)

    try:
        page.goto(url, wait_until="domcontentloaded", timeout=config.navigation_timeout_ms)
        _pause(sleep, config.settle_delay_ms)
        result = extract_craft_mod_item(page, timeout_ms=config.selector_wait_timeout_ms)
    except Exception as exc:  # noqa: BLE001
        counters.fail += 1
        record["craftModItem"] = None
        logger.warning("  ✗ Failed for %s: %s", url, exc)
    else:
        record["craftModItem"] = result.value
        logger.debug("  Debug: %s", json.dumps(result.debug, indent=2))
        # A page without a Craft Mod item counts as a failure, same as an error.
        if result.value:
            counters.success += 1
            logger.info("  ✓ Craft Mod Item: %s", result.value)
        else:
            counters.fail += 1
            logger.info("  ✗ Craft Mod Item: null")

    logger.info("  Success: %d | Fail: %d", counters.success, counters.fail)
    _pause(sleep, config.inter_record_delay_ms)
    return record


def run_all(
    dataset: PerkDataset,
    page: "Page",
    *,
    config: Settings = settings,
    sleep: Callable[[float], None] = time.sleep,
) -> RunCounters:
    """Process every record of *dataset* in order, mutating records in place."""
    counters = RunCounters()
    perks = dataset["perks"]
    total = len(perks)
    for i, record in enumerate(perks):
        process_record(
            page,
            record,
            counters,
            config=config,
            sleep=sleep,
            index=i + 1,
            total=total,
        )
    return counters


def enrich_file(
    input_path: str | Path,
    output_dir: str | Path | None = None,
    *,
    config: Settings = settings,
    dataset_name: str | None = None,
    clock: Clock = utcnow,
    session_factory: SessionFactory = browser_session,
    sleep: Callable[[float], None] = time.sleep,
) -> EnrichmentReport:
    """Enrich the dataset at *input_path* and write it to a new file.

    Args:
        input_path: The perk dataset JSON to read.  Never modified.
        output_dir: Directory for the output file (defaults to
            ``config.output_dir``).
        dataset_name: Output filename prefix (defaults to ``config.dataset_name``,
            then to the input file's name minus its timestamp).
        clock: Time source for the output filename.
        session_factory: Yields the browser page shared by the whole run.

    Returns:
        An :class:`EnrichmentReport` with the output path and counters.

    Raises:
        DatasetIOError: If the input cannot be read or the output written.
        SchemaError: If the input has no usable ``perks`` list.
    """
    dataset = load_dataset(input_path)
    perks = dataset["perks"]
    logger.info(
        "Loaded %d perks (%d with URLs) from %s",
        len(perks),
        sum(1 for p in perks if p.get("perkUrl")),
        input_path,
    )

    with session_factory(config) as page:
        counters = run_all(dataset, page, config=config, sleep=sleep)

    name = dataset_name or config.dataset_name or derive_dataset_name(input_path)
    output_path = write_dataset(
        dataset,
        output_dir if output_dir is not None else config.output_dir,
        dataset_name=name,
        clock=clock,
        input_path=input_path,
    )
    logger.info(
        "Enrichment finished: %d succeeded, %d failed", counters.success, counters.fail
    )
    return EnrichmentReport(output_path=output_path, counters=counters, total_records=len(perks))
