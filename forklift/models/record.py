from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..errors import UnknownFieldError

"""Record / Field model.

A Record is one row of imported tabular data. Readers fill ``fields``; validators
only ever touch ``is_valid`` and ``error_message`` (via ``mark_invalid``).
"""

__all__ = [
    "Field",
    "Record",
]


@dataclass(frozen=True)
class Field:
    """Smallest unit of cell data. Values are always text."""
    value: str = ""

    def is_empty(self) -> bool:
        return self.value == ""

    def __str__(self) -> str:
        return self.value


class Record:
    """One row of an ImportData set.

    Field access is explicit: ``get`` raises UnknownFieldError for names that were
    never set, so a missing source column is distinguishable from an empty cell.
    """

    def __init__(self, line_number: int, fields: dict[str, Any] | None = None) -> None:
        self._line_number = line_number
        self.is_valid = True
        self.error_message = ""
        self.fields: dict[str, Field] = {}
        for name, value in (fields or {}).items():
            self.set(name, value)

    @property
    def line_number(self) -> int:
        return self._line_number

    def get(self, name: str) -> Field:
        try:
            return self.fields[name]
        except KeyError:
            raise UnknownFieldError(name, self._line_number) from None

    def set(self, name: str, value: Field | Any) -> None:
        """Insert or overwrite a field. Plain values are stored as text."""
        if not isinstance(value, Field):
            value = Field("" if value is None else str(value))
        self.fields[name] = value

    def has(self, name: str) -> bool:
        return name in self.fields

    def is_empty(self, name: str) -> bool:
        return self.get(name).is_empty()

    def mark_invalid(self, message: str) -> None:
        """Flag the record as invalid. A second call overwrites the message."""
        self.is_valid = False
        self.error_message = f"error (line {self._line_number}): {message}"

    def __repr__(self) -> str:
        return (
            f"Record(line_number={self._line_number}, is_valid={self.is_valid}, "
            f"fields={ {k: v.value for k, v in self.fields.items()} })"
        )
