"""Tests for dataset loading, output naming, and writing."""

from __future__ import annotations

import json
import os
import re
import stat
import sys
from datetime import timedelta, timezone

import pytest

from conftest import FIXED_MOMENT, FIXED_STAMP
from perkscraper.dataset import (
    derive_dataset_name,
    format_timestamp,
    isoformat_z,
    load_dataset,
    output_filename,
    write_dataset,
)
from perkscraper.errors import DatasetIOError, SchemaError


def _write_json(path, data) -> None:
    path.write_text(json.dumps(data), encoding="utf-8")


# ---------------------------------------------------------------------------
# load_dataset
# ---------------------------------------------------------------------------

class TestLoadDataset:
    def test_loads_valid_document(self, tmp_path) -> None:
        path = tmp_path / "perks.json"
        _write_json(path, {"metadata": {"v": 1}, "perks": [{"name": "X"}]})
        data = load_dataset(path)
        assert data["perks"] == [{"name": "X"}]
        assert data["metadata"] == {"v": 1}

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(DatasetIOError):
            load_dataset(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(DatasetIOError):
            load_dataset(path)

    def test_io_error_is_os_error(self, tmp_path) -> None:
        with pytest.raises(OSError):
            load_dataset(tmp_path / "nope.json")

    def test_missing_perks_field(self, tmp_path) -> None:
        path = tmp_path / "p.json"
        _write_json(path, {"items": []})
        with pytest.raises(SchemaError, match="no 'perks'"):
            load_dataset(path)

    def test_perks_not_a_list(self, tmp_path) -> None:
        path = tmp_path / "p.json"
        _write_json(path, {"perks": {"name": "X"}})
        with pytest.raises(SchemaError, match="must be a list"):
            load_dataset(path)

    def test_top_level_not_object(self, tmp_path) -> None:
        path = tmp_path / "p.json"
        _write_json(path, [{"name": "X"}])
        with pytest.raises(SchemaError):
            load_dataset(path)

    def test_record_not_object(self, tmp_path) -> None:
        path = tmp_path / "p.json"
        _write_json(path, {"perks": [{"name": "X"}, "Y"]})
        with pytest.raises(SchemaError, match=r"perks\[1\]"):
            load_dataset(path)


# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------

class TestNaming:
    def test_format_timestamp_replaces_colons_and_dots(self) -> None:
        assert format_timestamp(FIXED_MOMENT) == FIXED_STAMP

    def test_format_timestamp_converts_to_utc(self) -> None:
        local = FIXED_MOMENT.astimezone(timezone(timedelta(hours=2)))
        assert format_timestamp(local) == FIXED_STAMP

    def test_isoformat_z(self) -> None:
        assert isoformat_z(FIXED_MOMENT) == "2025-07-06T03:41:33.584Z"

    def test_derive_dataset_name_strips_timestamp(self) -> None:
        assert derive_dataset_name("out/nwdb-perks-2025-07-06T03-41-33-584Z.json") == "nwdb-perks"

    def test_derive_dataset_name_plain_stem(self) -> None:
        assert derive_dataset_name("data/my-perks.json") == "my-perks"

    def test_output_filename(self) -> None:
        assert output_filename("nwdb-perks", FIXED_MOMENT) == f"nwdb-perks-craftmod-{FIXED_STAMP}.json"

    def test_output_filename_without_label(self) -> None:
        assert output_filename("nwdb-perks", FIXED_MOMENT, None) == f"nwdb-perks-{FIXED_STAMP}.json"


# ---------------------------------------------------------------------------
# write_dataset
# ---------------------------------------------------------------------------

class TestWriteDataset:
    def test_writes_timestamped_file(self, tmp_path, fixed_clock) -> None:
        data = {"metadata": {"source": "x"}, "perks": [{"name": "Ångström", "craftModItem": None}]}
        path = write_dataset(data, tmp_path / "out", dataset_name="nwdb-perks", clock=fixed_clock)

        assert path == tmp_path / "out" / f"nwdb-perks-craftmod-{FIXED_STAMP}.json"
        assert json.loads(path.read_text(encoding="utf-8")) == data
        assert "Ångström" in path.read_text(encoding="utf-8")

    def test_two_space_indent(self, tmp_path, fixed_clock) -> None:
        path = write_dataset({"perks": []}, tmp_path, dataset_name="d", clock=fixed_clock)
        assert path.read_text(encoding="utf-8") == '{\n  "perks": []\n}\n'

    def test_never_overwrites_existing_file(self, tmp_path, fixed_clock) -> None:
        first = write_dataset({"perks": [1]}, tmp_path, dataset_name="d", clock=fixed_clock)
        second = write_dataset({"perks": [2]}, tmp_path, dataset_name="d", clock=fixed_clock)

        assert first != second
        assert second.name == f"d-craftmod-{FIXED_STAMP}-1.json"
        assert json.loads(first.read_text(encoding="utf-8")) == {"perks": [1]}

    def test_never_overwrites_input(self, tmp_path, fixed_clock) -> None:
        input_path = tmp_path / f"d-craftmod-{FIXED_STAMP}.json"
        input_path.write_text('{"perks": []}', encoding="utf-8")

        out = write_dataset(
            {"perks": [1]}, tmp_path, dataset_name="d", clock=fixed_clock, input_path=input_path
        )
        assert out != input_path
        assert input_path.read_text(encoding="utf-8") == '{"perks": []}'

    def test_unwritable_directory_raises(self, tmp_path, fixed_clock) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        with pytest.raises(DatasetIOError):
            write_dataset({"perks": []}, blocker / "out", dataset_name="d", clock=fixed_clock)

    def test_unserialisable_leaves_no_file(self, tmp_path, fixed_clock) -> None:
        with pytest.raises(DatasetIOError):
            write_dataset({"perks": [object()]}, tmp_path, dataset_name="d", clock=fixed_clock)
        assert list(tmp_path.iterdir()) == []

    def test_failed_rename_cleans_up_temp_file(self, tmp_path, fixed_clock, monkeypatch) -> None:
        def fail_replace(src, dst):
            raise PermissionError("read-only")

        monkeypatch.setattr("perkscraper.dataset.os.replace", fail_replace)
        with pytest.raises(DatasetIOError):
            write_dataset({"perks": []}, tmp_path, dataset_name="d", clock=fixed_clock)
        assert list(tmp_path.iterdir()) == []

    def test_uses_current_time_by_default(self, tmp_path) -> None:
        path = write_dataset({"perks": []}, tmp_path, dataset_name="d")
        assert re.fullmatch(r"d-craftmod-\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{3}Z\.json", path.name)

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permission bits")
    def test_output_file_honours_umask(self, tmp_path, fixed_clock) -> None:
        previous = os.umask(0o022)
        try:
            path = write_dataset({"perks": []}, tmp_path, dataset_name="d", clock=fixed_clock)
        finally:
            os.umask(previous)
        assert stat.S_IMODE(path.stat().st_mode) == 0o644
