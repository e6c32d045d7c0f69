from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Processing result models for an import run.

ImportResult aggregates per-source statistics into the values printed on the
SUMMARY line and used for the CLI exit code.
"""

__all__ = [
    "SourceStat",
    "ImportResult",
]


@dataclass(frozen=True)
class SourceStat:
    """Per-source processing statistics (one record type = one source)."""
    record_type: str
    source: str  # SheetSource.label
    status: str  # success/failed
    bound_rows: int
    skipped_rows: int = 0
    conversion_failures: int = 0
    assignment_failures: int = 0
    elapsed_seconds: float = 0.0


@dataclass(frozen=True)
class ImportResult:
    """Aggregated results and summary output for one import run."""
    success_sources: int
    failed_sources: int
    bound_rows: int
    skipped_rows: int
    conversion_failures: int
    assignment_failures: int
    callbacks_fired: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_rows_per_sec: float
    callback_failures: int = 0
    persist_failed: bool = False
    source_stats: list[SourceStat] | None = None

    @property
    def total_sources(self) -> int:
        return self.success_sources + self.failed_sources

    @property
    def has_failures(self) -> bool:
        """True when a source, field, callback or the final save failed (skipped rows excluded)."""
        return bool(
            self.failed_sources
            or self.conversion_failures
            or self.assignment_failures
            or self.callback_failures
            or self.persist_failed
        )
