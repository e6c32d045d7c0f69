from __future__ import annotations

import json
from pathlib import Path

import pytest

import sample_records
from sheet_binder.cli.__main__ import main as cli_main

"""End-to-end run where one source is unreadable and one row has a bad cell.

The other sources still bind and are saved, callbacks fire for every source
that was applied, the run exits with 2 and the error log explains why.
"""


@pytest.fixture
def partial_failure_setup(temp_workdir: Path, write_config: Path) -> Path:
    text = write_config.read_text(encoding="utf-8").replace("trees.csv", "deleted_trees.csv")
    write_config.write_text(text, encoding="utf-8")
    (temp_workdir / "data" / "creatures.csv").write_text(
        "Name,Health,Tag 0\nGoblin,lots,weak\n", encoding="utf-8"
    )
    return temp_workdir


def _error_records(workdir: Path) -> list[dict]:
    (log_file,) = (workdir / "logs").glob("errors-*.log")
    return [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]


def test_partial_failure_exit_code_and_summary(partial_failure_setup: Path, capsys):
    code = cli_main([])
    out = capsys.readouterr().out

    assert code == 2
    assert "SUMMARY sources=4/4 success=3 failed=1 rows=4 skipped_rows=2 conversion_failures=1" in out
    assert "ERROR" in out


def test_partial_failure_still_notifies_applied_sources(partial_failure_setup: Path, capsys):
    cli_main([])
    capsys.readouterr()
    assert sample_records.IMPORTED == ["monsters", "palettes"]


def test_partial_failure_error_log(partial_failure_setup: Path, capsys):
    cli_main([])
    capsys.readouterr()
    records = _error_records(partial_failure_setup)

    (fetch,) = [r for r in records if r["error_type"] == "FETCH_FAILURE"]
    assert fetch["source"] == sample_records.TREE_SHEET
    assert fetch["record_type"] == "Tree"
    assert fetch["row"] == -1
    assert "file not found" in fetch["message"]

    (conversion,) = [r for r in records if r["error_type"] == "CONVERSION_FAILURE"]
    assert conversion["source"] == sample_records.CREATURE_SHEET
    assert conversion["row"] == 1
    assert conversion["column"] == "Health"
    assert "input='lots'" in conversion["message"]

    assert sum(r["error_type"] == "ROW_SKIPPED" for r in records) == 2
