from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Data-source identity for record types.

A record type is fed by one spreadsheet (``spreadsheet_id``), optionally
narrowed to a single tab (``gid``). The pair is the identity used to scope
post-import callbacks and to look up local source overrides.
"""

__all__ = [
    "SheetSource",
    "SourceStatus",
]


@dataclass(frozen=True)
class SheetSource:
    """Spreadsheet identity + optional sub-sheet identity."""
    spreadsheet_id: str
    gid: str | None = None

    def __post_init__(self) -> None:
        if not self.spreadsheet_id:
            raise ValueError("spreadsheet_id must be a non-empty string")
        # "" and None both mean "no sub-sheet"
        if self.gid is not None:
            gid = str(self.gid).strip()
            object.__setattr__(self, "gid", gid or None)

    @property
    def label(self) -> str:
        """Short identity used in logs and error records."""
        if self.gid:
            return f"{self.spreadsheet_id}#{self.gid}"
        return self.spreadsheet_id


class SourceStatus(Enum):
    """Lifecycle of one source within an import run.

    pending -> processing -> (success | failed)
    """
    PENDING = "pending"
    PROCESSING = "processing"
    SUCCESS = "success"
    FAILED = "failed"
