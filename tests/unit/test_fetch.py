from __future__ import annotations

from pathlib import Path
from unittest.mock import patch
from urllib.error import URLError

import pytest

from sheet_binder.models.config_models import ImportConfig, SourceOverride
from sheet_binder.models.sheet_source import SheetSource
from sheet_binder.tabular.fetch import FetchFailure, SheetFetcher, build_export_url


def test_build_export_url():
    assert build_export_url(SheetSource("abc")) == (
        "https://docs.google.com/spreadsheets/d/abc/export?format=csv"
    )
    assert build_export_url(SheetSource("abc", "12 3")) == (
        "https://docs.google.com/spreadsheets/d/abc/export?format=csv&gid=12%203"
    )


def test_build_export_url_custom_template():
    url = build_export_url(SheetSource("abc", "7"), "https://mirror.local/{spreadsheet_id}.csv")
    assert url == "https://mirror.local/abc.csv?gid=7"


def test_fetch_downloads_export_url():
    fetcher = SheetFetcher(ImportConfig())
    with patch("sheet_binder.tabular.fetch.read_csv_url") as mock_read:
        mock_read.return_value = [["Name", "Health"], ["Goblin", "15"]]
        table = fetcher.fetch(SheetSource("abc", "0"))
    mock_read.assert_called_once_with(
        "https://docs.google.com/spreadsheets/d/abc/export?format=csv&gid=0"
    )
    assert table.source == "abc#0"
    assert table.rows[0]["Health"] == "15"


def test_fetch_uses_local_override(tmp_path: Path):
    path = tmp_path / "goblins.csv"
    path.write_text("Name,Health\nGoblin,15\n", encoding="utf-8")
    config = ImportConfig(sources=[SourceOverride(spreadsheet_id="abc", path=str(path))])
    with patch("sheet_binder.tabular.fetch.read_csv_url") as mock_read:
        table = SheetFetcher(config).fetch(SheetSource("abc", "0"))
    mock_read.assert_not_called()
    assert table.rows[0].key() == "Goblin"


def test_fetch_wraps_errors():
    fetcher = SheetFetcher(ImportConfig())
    with patch("sheet_binder.tabular.fetch.read_csv_url", side_effect=URLError("offline")):
        with pytest.raises(FetchFailure) as e:
            fetcher.fetch(SheetSource("abc"))
    assert e.value.source == SheetSource("abc")
    assert "offline" in e.value.message


def test_fetch_missing_override_file(tmp_path: Path):
    config = ImportConfig(sources=[SourceOverride(spreadsheet_id="abc", path=str(tmp_path / "nope.csv"))])
    with pytest.raises(FetchFailure):
        SheetFetcher(config).fetch(SheetSource("abc"))
