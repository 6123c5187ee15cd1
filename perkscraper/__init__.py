"""Perk scraper package — NWDB perk harvesting and Craft Mod enrichment."""

from perkscraper.dataset import load_dataset, write_dataset
from perkscraper.enricher import enrich_file, process_record, run_all
from perkscraper.errors import DatasetIOError, SchemaError, SelectorTimeoutError
from perkscraper.extractor import extract_craft_mod_item, extract_from_html
from perkscraper.models import ExtractionResult, RunCounters

__all__ = [
    "load_dataset",
    "write_dataset",
    "enrich_file",
    "process_record",
    "run_all",
    "extract_craft_mod_item",
    "extract_from_html",
    "ExtractionResult",
    "RunCounters",
    "DatasetIOError",
    "SchemaError",
    "SelectorTimeoutError",
]
