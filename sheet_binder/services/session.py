from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from ..binding.binder import RowBinder
from ..binding.case import Case
from ..binding.errors import AssignmentFailure, BindError, ConversionFailure
from ..binding.metadata import SheetInfo
from ..binding.registry import CallbackRegistration, SheetRegistry, default_registry
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import ImportConfig
from ..models.error_record import (
    CALLBACK_FAILURE,
    FETCH_FAILURE,
    PERSIST_FAILURE,
    ROW_SKIPPED,
    ErrorRecord,
)
from ..models.processing_result import ImportResult, SourceStat
from ..models.sheet_source import SheetSource, SourceStatus
from ..tabular.fetch import FetchFailure, SheetFetcher
from ..tabular.reader import SheetTable
from .notifier import PostImportNotifier
from .object_store import ObjectStore
from .progress import ProgressTracker

"""Import session: one full run over every registered record type.

fetch -> parse -> bind each row onto its existing object -> persist -> notify

The session owns all run-scoped state (binder and resolver caches, error log
buffer, counters, imported-source batch); two sessions share nothing except
the registry they read from.
"""

__all__ = [
    "ImportSession",
]

logger = logging.getLogger(__name__)

MISSING_KEY = "MISSING_KEY"
LOOKUP_MISS = "LOOKUP_MISS"


@dataclass
class _SourceCounters:
    bound_rows: int = 0
    skipped_rows: int = 0
    conversion_failures: int = 0
    assignment_failures: int = 0


class ImportSession:
    """Applies every registered sheet source onto the objects of a store."""

    def __init__(
        self,
        store: ObjectStore,
        registry: SheetRegistry | None = None,
        config: ImportConfig | None = None,
        fetcher: SheetFetcher | None = None,
        error_log: ErrorLogBuffer | None = None,
    ) -> None:
        self.store = store
        self.registry = registry if registry is not None else default_registry
        self.config = config if config is not None else ImportConfig()
        self.fetcher = fetcher if fetcher is not None else SheetFetcher(self.config)
        self.error_log = error_log if error_log is not None else ErrorLogBuffer(self.config.error_log_dir)
        self.binder = RowBinder(self.registry)
        self._tables: dict[SheetSource, SheetTable] = {}
        self._callback_failures = 0

    def casing_for(self, info: SheetInfo) -> Case:
        return info.casing if info.casing is not None else self.config.default_casing

    def run(self, only: Iterable[str] | None = None) -> ImportResult:
        """Import every selected source, then persist and notify.

        Returns:
            ImportResult with aggregated metrics and per-source stats
        """
        start_time = datetime.now(UTC)
        selected = self.registry.select(only)

        source_stats: list[SourceStat] = []
        batch: dict[SheetSource, None] = {}
        totals = _SourceCounters()
        success_count = 0
        failed_count = 0

        with ProgressTracker(len(selected)) as progress:
            for record_type, info in selected:
                progress.start_source(record_type, info.source)

                stat = self._import_source(record_type, info)
                source_stats.append(stat)
                if stat.status == SourceStatus.SUCCESS.value:
                    success_count += 1
                    batch[info.source] = None
                else:
                    failed_count += 1
                totals.bound_rows += stat.bound_rows
                totals.skipped_rows += stat.skipped_rows
                totals.conversion_failures += stat.conversion_failures
                totals.assignment_failures += stat.assignment_failures

                progress.set_postfix(ok=success_count, failed=failed_count, rows=totals.bound_rows)
                progress.finish_source(success=stat.status == SourceStatus.SUCCESS.value)

        persisted = self._persist()
        callbacks_fired = 0
        if persisted:
            notifier = PostImportNotifier(self.registry, on_failure=self._record_callback_failure)
            callbacks_fired = notifier.notify(batch)

        log_path = self.error_log.flush()
        if log_path is not None:
            logger.info("Error log written to %s", log_path)

        end_time = datetime.now(UTC)
        elapsed_seconds = (end_time - start_time).total_seconds()
        throughput_rps = totals.bound_rows / elapsed_seconds if elapsed_seconds > 0 else 0.0

        return ImportResult(
            success_sources=success_count,
            failed_sources=failed_count,
            bound_rows=totals.bound_rows,
            skipped_rows=totals.skipped_rows,
            conversion_failures=totals.conversion_failures,
            assignment_failures=totals.assignment_failures,
            callbacks_fired=callbacks_fired,
            start_time=start_time,
            end_time=end_time,
            elapsed_seconds=elapsed_seconds,
            throughput_rows_per_sec=throughput_rps,
            callback_failures=self._callback_failures,
            persist_failed=not persisted,
            source_stats=source_stats,
        )

    def _fetch(self, source: SheetSource) -> SheetTable:
        # record types sharing one source read it once per run
        table = self._tables.get(source)
        if table is None:
            table = self.fetcher.fetch(source)
            self._tables[source] = table
        return table

    def _import_source(self, record_type: type, info: SheetInfo) -> SourceStat:
        started = datetime.now(UTC)
        source = info.source
        type_name = record_type.__name__
        counters = _SourceCounters()
        logger.info("Importing %s from %s", type_name, source.label)

        try:
            table = self._fetch(source)
        except FetchFailure as e:
            logger.error("Failed to fetch %s for %s: %s", source.label, type_name, e.message)
            self.error_log.append(
                ErrorRecord.create(
                    source=source.label,
                    record_type=type_name,
                    row=-1,
                    error_type=FETCH_FAILURE,
                    message=e.message,
                )
            )
            return SourceStat(
                record_type=type_name,
                source=source.label,
                status=SourceStatus.FAILED.value,
                bound_rows=0,
                elapsed_seconds=(datetime.now(UTC) - started).total_seconds(),
            )

        key_column = self.config.key_column
        casing = self.casing_for(info)
        for row in table.rows:
            key = row.key(key_column)
            if key is None:
                self._skip_row(source, type_name, row.row_number, MISSING_KEY, f"'{key_column}' cell is empty")
                counters.skipped_rows += 1
                continue
            target = self.store.find_by_name(record_type, key)
            if target is None:
                self._skip_row(source, type_name, row.row_number, LOOKUP_MISS, f"no {type_name} named '{key}'")
                counters.skipped_rows += 1
                continue

            outcome = self.binder.bind_row(target, row, record_type, casing)
            for failure in outcome.failures:
                self._record_bind_failure(source, type_name, row.row_number, failure)
                if isinstance(failure, ConversionFailure):
                    counters.conversion_failures += 1
                elif isinstance(failure, AssignmentFailure):
                    counters.assignment_failures += 1
            self.store.mark_dirty(target)
            counters.bound_rows += 1

        logger.info(
            "Imported %s: rows=%d skipped=%d conversion_failures=%d assignment_failures=%d",
            type_name,
            counters.bound_rows,
            counters.skipped_rows,
            counters.conversion_failures,
            counters.assignment_failures,
        )
        return SourceStat(
            record_type=type_name,
            source=source.label,
            status=SourceStatus.SUCCESS.value,
            bound_rows=counters.bound_rows,
            skipped_rows=counters.skipped_rows,
            conversion_failures=counters.conversion_failures,
            assignment_failures=counters.assignment_failures,
            elapsed_seconds=(datetime.now(UTC) - started).total_seconds(),
        )

    def _skip_row(self, source: SheetSource, type_name: str, row_number: int, reason: str, detail: str) -> None:
        logger.warning("Skipping %s row %d (%s): %s", source.label, row_number, reason, detail)
        self.error_log.append(
            ErrorRecord.create(
                source=source.label,
                record_type=type_name,
                row=row_number,
                error_type=ROW_SKIPPED,
                message=f"{reason}: {detail}",
            )
        )

    def _record_bind_failure(self, source: SheetSource, type_name: str, row_number: int, failure: BindError) -> None:
        self.error_log.append(
            ErrorRecord.create(
                source=source.label,
                record_type=type_name,
                row=row_number,
                error_type=failure.error_type,
                message=failure.describe(),
                column=failure.column,
            )
        )

    def _record_callback_failure(self, registration: CallbackRegistration, source: SheetSource, error: Exception) -> None:
        self._callback_failures += 1
        self.error_log.append(
            ErrorRecord.create(
                source=source.label,
                record_type="",
                row=-1,
                error_type=CALLBACK_FAILURE,
                message=f"{registration.name} raised {type(error).__name__}: {error}",
            )
        )

    def _persist(self) -> bool:
        try:
            self.store.save()
        except Exception as e:
            logger.exception("Failed to save imported objects: %s", e)
            self.error_log.append(
                ErrorRecord.create(
                    source="",
                    record_type="",
                    row=-1,
                    error_type=PERSIST_FAILURE,
                    message=f"{type(e).__name__}: {e}",
                )
            )
            return False
        return True
