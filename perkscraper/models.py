"""Data models for the scraper pipeline.

Perk records and datasets stay plain ``dict`` objects so that unknown keys
pass through untouched; only the transient values get dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

PerkRecord = Dict[str, Any]
PerkDataset = Dict[str, Any]


@dataclass
class ExtractionResult:
    """Outcome of a single page visit.

    ``debug`` records the intermediate lookups for logging only; it is never
    written to the output dataset.
    """

    value: str | None
    debug: dict[str, Any] = field(default_factory=dict)


@dataclass
class RunCounters:
    """Per-run success/failure tallies.  Skipped records count toward neither."""

    success: int = 0
    fail: int = 0

    @property
    def processed(self) -> int:
        return self.success + self.fail


@dataclass
class EnrichmentReport:
    """Result of a full enrichment run."""

    output_path: Path
    counters: RunCounters
    total_records: int


@dataclass
class HarvestReport:
    """Result of a full perk-list harvest."""

    output_path: Path
    total_perks: int


@dataclass
class DatasetSummary:
    total_perks: int
    unique_perks: int
    with_urls: int
    with_craft_mods: int
    with_craft_mod_items: int
    tier_breakdown: dict[str, int] = field(default_factory=dict)
