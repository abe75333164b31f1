from __future__ import annotations

import sys
from collections import Counter
from pathlib import Path
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Batch progress bar (TTY only).

One tick per source workbook, with the running imported / rejected / skipped
counts and the number of imported records shown next to the bar. In non-TTY
environments (CI, piped output) no bar is drawn but the counts are still kept.
"""

__all__ = [
    "ImportProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ImportProgress:
    """Tracks the outcome of each workbook in a batch run."""

    def __init__(self, total_files: int, *, description: str = "Importing") -> None:
        self.total_files = total_files
        self.description = description
        self.current_source: str | None = None
        self.counts: Counter[str] = Counter()  # ImportStatus value -> files
        self.records = 0

        self.pbar: TqdmType[Any] | None = None
        if is_tty_enabled():
            self.pbar = tqdm(
                total=total_files,
                desc=description,
                unit="file",
                leave=True,
                ncols=80,
                ascii=True,
            )

    @property
    def done(self) -> int:
        return sum(self.counts.values())

    def start_file(self, source_path: str) -> None:
        self.current_source = source_path
        if self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({Path(source_path).name})")

    def record_outcome(self, status: str, records: int = 0) -> None:
        """Count one finished workbook; ``records`` only matters for imported files."""
        self.counts[status] += 1
        if status == "imported":
            self.records += records
        self.current_source = None
        if self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_description(self.description)
            self.pbar.set_postfix(
                imported=self.counts["imported"],
                rejected=self.counts["rejected"],
                skipped=self.counts["skipped"],
                records=self.records,
            )

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ImportProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
