"""Reading and writing perk dataset JSON files.

Datasets are loaded once, mutated in place by the enrichment loop, and written
once to a *new* timestamped file.  The input file is never touched.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

from perkscraper.errors import DatasetIOError, SchemaError
from perkscraper.models import PerkDataset

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# Trailing "-2025-07-06T03-41-33-584Z" as produced by format_timestamp().
_TIMESTAMP_SUFFIX = re.compile(r"-\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{3}Z$")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def load_dataset(path: str | Path) -> PerkDataset:
    """Load a perk dataset from *path*.

    Raises:
        DatasetIOError: If the file is missing, unreadable, or not valid JSON.
        SchemaError: If the document has no ``perks`` list of objects.
    """
    dataset_path = Path(path)
    try:
        text = dataset_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DatasetIOError(f"Cannot read dataset {dataset_path}: {exc}") from exc

    try:
        data: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DatasetIOError(f"Dataset {dataset_path} is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise SchemaError(f"Dataset {dataset_path} must be a JSON object")
    if "perks" not in data:
        raise SchemaError(f"Dataset {dataset_path} has no 'perks' field")

    perks = data["perks"]
    if not isinstance(perks, list):
        raise SchemaError(f"'perks' in {dataset_path} must be a list, got {type(perks).__name__}")
    for i, record in enumerate(perks):
        if not isinstance(record, dict):
            raise SchemaError(f"perks[{i}] in {dataset_path} is not an object")

    logger.debug("Loaded %d perk records from %s", len(perks), dataset_path)
    return data


# ---------------------------------------------------------------------------
# File naming
# ---------------------------------------------------------------------------

def isoformat_z(moment: datetime) -> str:
    """Return *moment* in UTC as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S") + f".{moment.microsecond // 1000:03d}Z"


def format_timestamp(moment: datetime) -> str:
    """Return *moment* as a filename-safe ISO-8601 UTC string.

    ``2025-07-06T03:41:33.584Z`` becomes ``2025-07-06T03-41-33-584Z``.
    """
    return isoformat_z(moment).replace(":", "-").replace(".", "-")


def derive_dataset_name(input_path: str | Path) -> str:
    """Return the dataset name for *input_path*, minus any timestamp suffix."""
    stem = Path(input_path).stem
    return _TIMESTAMP_SUFFIX.sub("", stem) or stem


def output_filename(dataset_name: str, moment: datetime, label: str | None = "craftmod") -> str:
    parts = [dataset_name]
    if label:
        parts.append(label)
    parts.append(format_timestamp(moment))
    return "-".join(parts) + ".json"


def _unique_path(directory: Path, filename: str, input_path: Path | None) -> Path:
    """Return a path in *directory* that is neither an existing file nor the input."""
    candidate = directory / filename
    base = candidate.stem
    counter = 0
    while candidate.exists() or (
        input_path is not None and candidate.resolve() == input_path.resolve()
    ):
        counter += 1
        candidate = directory / f"{base}-{counter}.json"
    return candidate


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------

def write_dataset(
    dataset: PerkDataset,
    output_dir: str | Path,
    *,
    dataset_name: str,
    clock: Clock = utcnow,
    input_path: str | Path | None = None,
    label: str | None = "craftmod",
) -> Path:
    """Serialise *dataset* to a new timestamped JSON file in *output_dir*.

    The JSON is written to a temporary file next to the target and renamed
    into place, so a failed write never leaves a partial output file.

    Returns:
        The path of the file written.

    Raises:
        DatasetIOError: If the dataset cannot be serialised or written.
    """
    try:
        payload = json.dumps(dataset, indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise DatasetIOError(f"Dataset is not JSON-serialisable: {exc}") from exc

    out_dir = Path(output_dir)
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DatasetIOError(f"Cannot create output directory {out_dir}: {exc}") from exc

    filename = output_filename(dataset_name, clock(), label)
    target = _unique_path(out_dir, filename, Path(input_path) if input_path else None)

    tmp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=out_dir,
            prefix=f".{target.stem}.",
            suffix=".tmp",
            delete=False,
        ) as fh:
            tmp_path = Path(fh.name)
            fh.write(payload)
            fh.write("\n")
        os.chmod(tmp_path, 0o666 & ~_current_umask())
        os.replace(tmp_path, target)
    except OSError as exc:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
        raise DatasetIOError(f"Cannot write dataset to {target}: {exc}") from exc

    logger.debug("Wrote dataset to %s", target)
    return target
