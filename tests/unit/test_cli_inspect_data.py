from __future__ import annotations

from pathlib import Path

import sample_records
from sample_records import build_store
from sheet_binder.cli.__main__ import EXIT_SUCCESS_ALL, main as cli_main


def test_inspect_data_prints_columns_and_sample_rows(write_config, capsys):
    code = cli_main(["--inspect-data"])
    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS_ALL
    assert "TYPE: Monster source=monster-sheet#0" in out
    assert "TYPE: Creature source=creature-sheet" in out
    assert "columns=['Name', 'Max Health', 'Element'" in out
    assert "rows=4" in out
    assert "    row 1: {'Name': 'Slime'" in out
    # only the first rows are sampled
    assert "row 4:" not in out
    # nothing is bound or persisted
    assert "SUMMARY" not in out
    assert sample_records.IMPORTED == []


def test_inspect_data_respects_only(write_config, capsys):
    code = cli_main(["--inspect-data", "--only", "Palette"])
    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS_ALL
    assert "TYPE: Palette source=palette-sheet" in out
    assert "TYPE: Monster" not in out
    assert "row 1: {'Name': 'Sunset', 'primary_color': '#ff8800'" in out


def test_inspect_data_reports_fetch_errors(write_config: Path, capsys):
    text = write_config.read_text(encoding="utf-8").replace("creatures.csv", "missing.csv")
    write_config.write_text(text, encoding="utf-8")
    code = cli_main(["--inspect-data", "--only", "Creature"])
    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS_ALL
    assert "fetch_error: file not found:" in out


def test_inspect_data_does_not_touch_the_store(write_config, monkeypatch, capsys):
    built: list[object] = []

    def tracking_store():
        store = build_store()
        built.append(store)
        return store

    monkeypatch.setattr(sample_records, "build_store", tracking_store)
    cli_main(["--inspect-data"])
    capsys.readouterr()
    assert built == []


def test_inspect_data_warns_on_unknown_only(write_config, capsys):
    code = cli_main(["--inspect-data", "--only", "Unicorn"])
    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS_ALL
    assert "WARN --only Unicorn does not name a registered record type" in out
    assert "inspect: no registered record types" in out
