from __future__ import annotations

from collections.abc import Iterator

from .record import Record

"""ImportData: ordered set of records read from one source workbook."""

__all__ = [
    "ImportData",
]


class ImportData:
    """Records of one source file, kept in source-row order.

    Line numbers must be strictly increasing; ``append`` refuses anything else.
    """

    def __init__(self, source_path: str = "", columns: list[str] | None = None) -> None:
        self.source_path = source_path
        self.columns: list[str] = list(columns or [])
        self._records: list[Record] = []

    def append(self, record: Record) -> None:
        if self._records and record.line_number <= self._records[-1].line_number:
            raise ValueError(
                f"line numbers must increase: {record.line_number} after "
                f"{self._records[-1].line_number}"
            )
        self._records.append(record)

    def new_record(self, line_number: int, fields: dict[str, object] | None = None) -> Record:
        """Create a record, append it and return it."""
        record = Record(line_number, fields)
        self.append(record)
        return record

    @property
    def records(self) -> list[Record]:
        return list(self._records)

    @property
    def is_valid(self) -> bool:
        return all(r.is_valid for r in self._records)

    def invalid_records(self) -> list[Record]:
        return [r for r in self._records if not r.is_valid]

    def error_messages(self) -> list[str]:
        return [r.error_message for r in self._records if not r.is_valid]

    def __iter__(self) -> Iterator[Record]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __getitem__(self, index: int) -> Record:
        return self._records[index]

    def __repr__(self) -> str:  # pragma: no cover (trivial)
        return f"ImportData(source_path={self.source_path!r}, records={len(self._records)})"
