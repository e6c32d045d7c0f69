from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.request import urlopen

import pandas as pd

from ..models.row_data import RowData

"""Tabular reader: CSV / xlsx -> header + RowData rows.

The first row is the header, every following row is a data row. Cells are
read as text only; typing happens later in the value converter.
- NaN / missing cells -> ""
- integral floats from spreadsheet engines (12.0) -> "12"
- trailing empty cells are trimmed, all-empty rows are dropped
- cells beyond the header width are dropped with a warning
"""

__all__ = [
    "TableReadError",
    "SheetTable",
    "read_csv_text",
    "read_csv_url",
    "read_table_file",
]

logger = logging.getLogger(__name__)

# Read every cell as-is: no "NA"/"null" -> NaN conversion
_CSV_OPTIONS: dict[str, Any] = {
    "header": None,
    "dtype": str,
    "keep_default_na": False,
    "skip_blank_lines": True,
}


class TableReadError(Exception):
    """Raised when a table cannot be read or tokenized."""


@dataclass
class SheetTable:
    """Header + data rows of one source."""
    columns: list[str]
    rows: list[RowData] = field(default_factory=list)
    source: str = ""

    def __len__(self) -> int:
        return len(self.rows)

    @classmethod
    def from_rows(cls, rows: list[list[str]], *, source: str = "") -> SheetTable:
        """Apply the first row as header to the remaining rows.

        Fewer than two rows yields an empty table. A duplicate header keeps its
        first occurrence; blank header cells are not addressable.
        """
        if len(rows) < 2:
            columns = [c.strip() for c in rows[0]] if rows else []
            return cls(columns=columns, rows=[], source=source)

        columns = [c.strip() for c in rows[0]]
        positions: dict[str, int] = {}
        for index, name in enumerate(columns):
            if not name:
                continue
            if name in positions:
                logger.warning(
                    "duplicate column '%s' in %s header (position %d ignored)",
                    name,
                    source or "table",
                    index + 1,
                )
                continue
            positions[name] = index

        data: list[RowData] = []
        for row_number, cells in enumerate(rows[1:], start=1):
            if not any(c.strip() for c in cells):
                continue
            values = {name: cells[i] for name, i in positions.items() if i < len(cells)}
            data.append(RowData(row_number=row_number, cells=values, raw_cells=list(cells)))
        return cls(columns=columns, rows=data, source=source)


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if pd.isna(value):
            return ""
        if value.is_integer():
            return str(int(value))
    if isinstance(value, pd.Timestamp):
        return value.isoformat()
    return str(value)


def _frame_rows(df: pd.DataFrame) -> list[list[str]]:
    rows: list[list[str]] = []
    for raw in df.itertuples(index=False, name=None):
        cells = [_cell_text(v) for v in raw]
        while cells and cells[-1] == "":
            cells.pop()
        rows.append(cells)
    return rows


def _read_csv(text: str, label: str) -> list[list[str]]:
    """Tokenize CSV text; rows wider than the header are cut to the header width."""
    try:
        width = pd.read_csv(io.StringIO(text), nrows=1, engine="python", **_CSV_OPTIONS).shape[1]
    except pd.errors.EmptyDataError:
        return []
    except pd.errors.ParserError as e:
        raise TableReadError(f"cannot tokenize {label}: {e}") from e

    def truncate(cells: list[str]) -> list[str]:
        logger.warning(
            "%s: row with %d cells cut to the %d header columns (extra: %s)",
            label,
            len(cells),
            width,
            cells[width:],
        )
        return cells[:width]

    try:
        df = pd.read_csv(io.StringIO(text), engine="python", on_bad_lines=truncate, **_CSV_OPTIONS)
    except pd.errors.ParserError as e:
        raise TableReadError(f"cannot tokenize {label}: {e}") from e
    return _frame_rows(df)


def read_csv_text(text: str) -> list[list[str]]:
    """Tokenize CSV text into rows of cell strings."""
    return _read_csv(text, "csv text")


def read_csv_url(url: str) -> list[list[str]]:
    """Download and tokenize a CSV export. Network errors propagate to the caller."""
    with urlopen(url) as response:
        text = response.read().decode("utf-8-sig")
    return _read_csv(text, url)


def read_table_file(path: Path, sheet_name: str | None = None) -> list[list[str]]:
    """Read a local .csv or .xlsx file.

    ``sheet_name`` selects the worksheet of a workbook (first sheet when None).
    """
    if not path.exists():
        raise TableReadError(f"file not found: {path}")
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return _read_csv(path.read_text(encoding="utf-8-sig"), str(path))
    if suffix in (".xlsx", ".xlsm"):
        try:
            df = pd.read_excel(
                path,
                sheet_name=sheet_name if sheet_name is not None else 0,
                header=None,
                keep_default_na=False,
                engine="openpyxl",
            )
        except ValueError as e:
            # unknown worksheet name
            raise TableReadError(f"cannot read {path}: {e}") from e
        return _frame_rows(df)
    raise TableReadError(f"unsupported file type '{suffix}': {path}")
