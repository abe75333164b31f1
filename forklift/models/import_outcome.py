from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

"""ImportOutcome domain model with ImportStage / ImportStatus enums.

The import of one source file walks a linear state machine:

    FORMAT_CHECK → ROOT_CHECK → READ → VALIDATE → RESOLVE_DESTINATION → CONVERT → DONE

Any failing step ends in REJECTED. The outcome records the last stage reached
so callers can tell where a rejection happened.
"""

__all__ = [
    "ImportStage",
    "ImportStatus",
    "ImportOutcome",
]


class ImportStage(Enum):
    """Step of the import state machine."""
    START = "start"
    FORMAT_CHECK = "format_check"
    ROOT_CHECK = "root_check"
    READ = "read"
    VALIDATE = "validate"
    RESOLVE_DESTINATION = "resolve_destination"
    CONVERT = "convert"
    DONE = "done"


class ImportStatus(Enum):
    """Terminal status of one import.

    - IMPORTED: destination record populated and marked dirty
    - REJECTED: a check failed, nothing was handed to the converter
    - SKIPPED: no pipeline matched the source (batch mode only)
    """
    IMPORTED = "imported"
    REJECTED = "rejected"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ImportOutcome:
    """Result of importing a single source file."""
    source: str
    status: ImportStatus
    stage: ImportStage  # last stage reached (failing stage when rejected)
    destination: str | None = None
    record_count: int = 0
    error: str | None = None  # rejection summary
    error_type: str | None = None
    messages: list[str] = field(default_factory=list)  # per-record messages
    start_time: datetime | None = None
    end_time: datetime | None = None

    @property
    def imported(self) -> bool:
        return self.status is ImportStatus.IMPORTED

    @property
    def elapsed_seconds(self) -> float:
        if self.start_time is None or self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()
