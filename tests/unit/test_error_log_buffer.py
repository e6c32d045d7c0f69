from __future__ import annotations
import json
from pathlib import Path
from sheet_binder.logging.error_log import ErrorRecord, ErrorLogBuffer

EXPECTED_KEYS = {"timestamp", "source", "record_type", "row", "column", "error_type", "message"}


def test_error_record_creation_and_json_line():
    rec = ErrorRecord.create(
        source="abc#0",
        record_type="Monster",
        row=10,
        error_type="CONVERSION_FAILURE",
        message="column='Health' input='x' target=int: not an integer: 'x'",
        column="Health",
    )
    data = json.loads(rec.to_json_line())
    assert data["source"] == "abc#0"
    assert data["record_type"] == "Monster"
    assert data["row"] == 10
    assert data["column"] == "Health"
    assert data["error_type"] == "CONVERSION_FAILURE"
    assert "timestamp" in data and data["timestamp"].endswith("Z")
    assert set(data.keys()) == EXPECTED_KEYS


def test_error_log_buffer_flush(temp_workdir: Path):
    buf = ErrorLogBuffer(temp_workdir / "logs")
    buf.append(ErrorRecord.create("abc", "Monster", 1, "ROW_SKIPPED", "MISSING_KEY: 'Name' cell is empty"))
    buf.append(ErrorRecord.create("abc", "Monster", -1, "FETCH_FAILURE", "offline"))
    assert len(buf) == 2
    path = buf.flush()
    assert path is not None and path.exists()
    assert path.parent == temp_workdir / "logs"
    assert path.name.startswith("errors-") and path.suffix == ".log"

    lines = path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    for raw in lines:
        assert set(json.loads(raw).keys()) == EXPECTED_KEYS
    assert len(buf) == 0
    assert buf.written == 2


def test_error_log_buffer_appends_on_second_flush(temp_workdir: Path):
    buf = ErrorLogBuffer(temp_workdir / "logs")
    buf.append(ErrorRecord.create("abc", "Monster", 1, "ROW_SKIPPED", "first"))
    first = buf.flush()
    buf.append(ErrorRecord.create("abc", "Monster", 2, "ROW_SKIPPED", "second"))
    second = buf.flush()
    assert first == second
    assert len(second.read_text(encoding="utf-8").splitlines()) == 2


def test_empty_flush_creates_nothing(temp_workdir: Path):
    buf = ErrorLogBuffer(temp_workdir / "nested" / "logs")
    assert buf.flush() is None
    assert not (temp_workdir / "nested").exists()
