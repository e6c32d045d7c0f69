from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for error logging.

This module defines the ErrorRecord dataclass used for structured error logging
during a sheet import. It supports row=-1 as a sentinel value for source-level
errors (fetch failures, callback failures) where no row applies.
"""

__all__ = [
    "ErrorRecord",
    "FETCH_FAILURE",
    "ROW_SKIPPED",
    "CONVERSION_FAILURE",
    "ASSIGNMENT_FAILURE",
    "CALLBACK_FAILURE",
    "PERSIST_FAILURE",
]

FETCH_FAILURE = "FETCH_FAILURE"
ROW_SKIPPED = "ROW_SKIPPED"
CONVERSION_FAILURE = "CONVERSION_FAILURE"
ASSIGNMENT_FAILURE = "ASSIGNMENT_FAILURE"
CALLBACK_FAILURE = "CALLBACK_FAILURE"
PERSIST_FAILURE = "PERSIST_FAILURE"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: Source label (``spreadsheet_id`` or ``spreadsheet_id#gid``)
        record_type: Name of the record type being imported
        row: Data row number (1-based). Use -1 for source-level errors
        column: Column involved, "" when not applicable
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable description including raw text / target type
    """
    timestamp: str
    source: str
    record_type: str
    row: int
    column: str
    error_type: str
    message: str

    @staticmethod
    def create(
        source: str,
        record_type: str,
        row: int,
        error_type: str,
        message: str,
        column: str = "",
    ) -> ErrorRecord:
        """Create a new ErrorRecord with current UTC timestamp."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            record_type=record_type,
            row=row,
            column=column,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize ErrorRecord to JSON Lines format (fixed key set)."""
        return json.dumps(asdict(self), ensure_ascii=False)
