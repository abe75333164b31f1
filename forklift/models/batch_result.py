from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Batch result models for multi-file import runs."""


@dataclass(frozen=True)
class FileStat:
    """Per-file statistics collected by process_all."""
    file_name: str  # source path (posix)
    status: str  # imported/rejected/skipped
    records: int  # record count read from the workbook
    elapsed_seconds: float
    destination: str | None = None


@dataclass(frozen=True)
class BatchResult:
    """Aggregated results of one process_all run, rendered as the SUMMARY line."""
    imported_files: int
    rejected_files: int
    skipped_files: int
    total_records: int  # records handed to converters
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None

    @property
    def total_files(self) -> int:
        return self.imported_files + self.rejected_files + self.skipped_files
