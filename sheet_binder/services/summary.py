from __future__ import annotations

from ..models.processing_result import ImportResult

"""SUMMARY line rendering.

Format:
SUMMARY sources={total}/{total} success={success} failed={failed} rows={rows}
skipped_rows={skipped} conversion_failures={conv} assignment_failures={assign}
elapsed_sec={elapsed} throughput_rps={throughput}
"""

__all__ = [
    "format_number",
    "render_summary_line",
]


def format_number(value: float) -> str:
    """Plain decimal text: integral values without a fraction, never scientific notation."""
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(value)


def render_summary_line(result: ImportResult) -> str:
    """Render the SUMMARY line for one import run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2023, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2023, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ImportResult(
        ...     success_sources=2, failed_sources=0, bound_rows=10, skipped_rows=1,
        ...     conversion_failures=0, assignment_failures=0, callbacks_fired=1,
        ...     start_time=start, end_time=end, elapsed_seconds=2.0,
        ...     throughput_rows_per_sec=5.0,
        ... )
        >>> render_summary_line(result)  # doctest: +ELLIPSIS
        'SUMMARY sources=2/2 success=2 failed=0 rows=10 skipped_rows=1 ... elapsed_sec=2 throughput_rps=5'
    """
    total = result.total_sources
    return (
        f"SUMMARY sources={total}/{total} "
        f"success={result.success_sources} "
        f"failed={result.failed_sources} "
        f"rows={result.bound_rows} "
        f"skipped_rows={result.skipped_rows} "
        f"conversion_failures={result.conversion_failures} "
        f"assignment_failures={result.assignment_failures} "
        f"elapsed_sec={format_number(result.elapsed_seconds)} "
        f"throughput_rps={format_number(result.throughput_rows_per_sec)}"
    )
