"""Perk scraper CLI — entry-point for all scraper operations.

Usage:
    python cli/main.py --help

Commands:
    perks    → harvest the NWDB perk list into a new dataset file
    enrich   → visit each perk page and add its Craft Mod item
    summary  → print statistics for a dataset file
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from perkscraper.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any working directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import dataclasses
import logging
from typing import Optional

import typer
from playwright.sync_api import Error as PlaywrightError

from perkscraper.config import Settings, settings
from perkscraper.dataset import load_dataset
from perkscraper.enricher import enrich_file
from perkscraper.errors import DatasetIOError, SchemaError
from perkscraper.perks_list import harvest_perks
from perkscraper.summary import format_summary, summarize

app = typer.Typer(
    name="perkscraper",
    help="NWDB perk scraper CLI.",
    no_args_is_help=True,
)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level, logging.INFO)
    logging.basicConfig(level=level, format="%(message)s")


def _run_config(
    headless: Optional[bool] = None,
    settle_delay_ms: Optional[int] = None,
    inter_record_delay_ms: Optional[int] = None,
) -> Settings:
    """Return a copy of the global settings with CLI overrides applied."""
    overrides = {
        "headless": headless,
        "settle_delay_ms": settle_delay_ms,
        "inter_record_delay_ms": inter_record_delay_ms,
    }
    return dataclasses.replace(settings, **{k: v for k, v in overrides.items() if v is not None})


# ---------------------------------------------------------------------------
# Harvest
# ---------------------------------------------------------------------------
@app.command("perks")
def perks(
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", help="Directory for the output file."),
    headless: Optional[bool] = typer.Option(None, "--headless/--headed", help="Run the browser headless."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Harvest every perk from the NWDB perk list."""
    _configure_logging(verbose)
    config = _run_config(headless=headless)

    typer.echo(f"[perks] Harvesting {config.perks_base_url} …")
    try:
        report = harvest_perks(output_dir, config=config)
    except (DatasetIOError, PlaywrightError) as exc:
        typer.echo(f"❌ Error: {exc}")
        raise typer.Exit(code=1)

    typer.echo(f"[perks] Total perks scraped: {report.total_perks}")
    typer.echo(f"✅ Done! Output written to {report.output_path}")


# ---------------------------------------------------------------------------
# Enrich
# ---------------------------------------------------------------------------
@app.command("enrich")
def enrich(
    input_file: Path = typer.Argument(..., help="Perk dataset JSON to enrich."),
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", help="Directory for the output file."),
    dataset_name: Optional[str] = typer.Option(None, "--dataset-name", help="Output filename prefix."),
    headless: Optional[bool] = typer.Option(None, "--headless/--headed", help="Run the browser headless."),
    settle_delay_ms: Optional[int] = typer.Option(None, "--settle-delay-ms", help="Pause after each page load."),
    inter_record_delay_ms: Optional[int] = typer.Option(
        None, "--inter-record-delay-ms", help="Pause between perks."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Add each perk's Craft Mod item, writing an enriched copy of INPUT_FILE."""
    _configure_logging(verbose)
    config = _run_config(headless, settle_delay_ms, inter_record_delay_ms)

    typer.echo(f"[enrich] Enriching {str(input_file)!r} …")
    try:
        report = enrich_file(input_file, output_dir, config=config, dataset_name=dataset_name)
    except (DatasetIOError, SchemaError, PlaywrightError) as exc:
        typer.echo(f"❌ Error: {exc}")
        raise typer.Exit(code=1)

    counters = report.counters
    typer.echo(f"[enrich] Success: {counters.success} | Fail: {counters.fail}")
    typer.echo(f"✅ Done! Output written to {report.output_path}")


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------
@app.command("summary")
def summary(
    input_file: Path = typer.Argument(..., help="Perk dataset JSON to summarise."),
) -> None:
    """Print statistics for a perk dataset."""
    try:
        dataset = load_dataset(input_file)
    except (DatasetIOError, SchemaError) as exc:
        typer.echo(f"❌ Error: {exc}")
        raise typer.Exit(code=1)

    typer.echo(f"📊 {input_file.name}")
    for line in format_summary(summarize(dataset)):
        typer.echo(line)


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
