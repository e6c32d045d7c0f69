from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

"""RowData model: one data record of a sheet.

RowData represents a single row after the header has been applied. Lookups
are by exact, case-sensitive column name; insertion order is irrelevant.
"""

__all__ = [
    "RowData",
]


@dataclass(frozen=True)
class RowData(Mapping[str, str]):
    """Logical representation of a single data row.

    ``row_number`` is 1-based and counts data rows only (the header is row 0).
    ``raw_cells`` keeps the original cell sequence for diagnostics.
    """
    row_number: int
    cells: dict[str, str]
    raw_cells: list[str] | None = field(default=None, compare=False)

    def __getitem__(self, column: str) -> str:
        return self.cells[column]

    def __iter__(self) -> Iterator[str]:
        return iter(self.cells)

    def __len__(self) -> int:
        return len(self.cells)

    def key(self, key_column: str = "Name") -> str | None:
        """Return the record key, or None when the key cell is missing/blank."""
        value = self.cells.get(key_column)
        if value is None or not value.strip():
            return None
        return value
