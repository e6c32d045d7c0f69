"""Tabular input: reading CSV/xlsx sources into header + RowData rows."""

from .fetch import FetchFailure, SheetFetcher, build_export_url
from .reader import SheetTable, TableReadError, read_csv_text, read_csv_url, read_table_file

__all__ = [
    "FetchFailure",
    "SheetFetcher",
    "SheetTable",
    "TableReadError",
    "build_export_url",
    "read_csv_text",
    "read_csv_url",
    "read_table_file",
]
