"""Dataset statistics for a quick look at a harvested or enriched file."""

from __future__ import annotations

from typing import Any

from perkscraper.models import DatasetSummary, PerkDataset


def _text(value: Any) -> str | None:
    """Return *value* if it is a non-empty string, else ``None``."""
    return value if isinstance(value, str) and value else None


def _craft_mod_name(perk: dict[str, Any]) -> str | None:
    craft_mod = perk.get("craftMod")
    if not isinstance(craft_mod, dict):
        return None
    return _text(craft_mod.get("name"))


def summarize(dataset: PerkDataset) -> DatasetSummary:
    perks = dataset["perks"]
    tiers: dict[str, int] = {}
    for perk in perks:
        tier = _text(perk.get("tier"))
        if tier:
            tiers[tier] = tiers.get(tier, 0) + 1

    return DatasetSummary(
        total_perks=len(perks),
        unique_perks=len({name for name in (_text(p.get("name")) for p in perks) if name}),
        with_urls=sum(1 for p in perks if p.get("perkUrl")),
        with_craft_mods=sum(1 for p in perks if _craft_mod_name(p)),
        with_craft_mod_items=sum(1 for p in perks if p.get("craftModItem")),
        tier_breakdown=dict(sorted(tiers.items())),
    )
