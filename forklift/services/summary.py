from __future__ import annotations

from ..models.batch_result import BatchResult

"""SUMMARY line rendering for batch import runs."""


def _format_seconds(seconds: float) -> str:
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # Format very small numbers to avoid scientific notation
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return str(round(seconds, 3))


def render_summary_line(result: BatchResult) -> str:
    """Render the SUMMARY line of a batch run.

    Format:
    SUMMARY files={total} imported={imported} rejected={rejected}
    skipped={skipped} records={records} elapsed_sec={elapsed}

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = BatchResult(
        ...     imported_files=2, rejected_files=1, skipped_files=0, total_records=40,
        ...     start_time=start, end_time=end, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY files=3 imported=2 rejected=1 skipped=0 records=40 elapsed_sec=2'
    """
    return (
        f"SUMMARY files={result.total_files} "
        f"imported={result.imported_files} "
        f"rejected={result.rejected_files} "
        f"skipped={result.skipped_files} "
        f"records={result.total_records} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
