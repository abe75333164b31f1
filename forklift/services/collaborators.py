from __future__ import annotations

import logging
from typing import Any, Protocol, TypeVar, runtime_checkable

from ..models.import_data import ImportData
from ..models.record import Record

"""Collaborator interfaces used by the import processor.

Readers, validators, converters and stores are injected into ImportProcessor;
nothing in the pipeline constructs them from type names.
"""

__all__ = [
    "Reader",
    "Validator",
    "Converter",
    "ManualImporter",
    "RecordStore",
    "Notifier",
    "LoggingNotifier",
]

T = TypeVar("T")

logger = logging.getLogger(__name__)


@runtime_checkable
class Reader(Protocol):
    def read(self, source_path: str) -> ImportData:
        """Fill an ImportData from ``source_path``; raise ReadError on malformed input."""
        ...


@runtime_checkable
class Validator(Protocol):
    def validate(self, record: Record) -> tuple[bool, str]:
        """Return ``(accepted, message)``; the message is used only when rejected."""
        ...


@runtime_checkable
class Converter(Protocol):
    def convert(self, destination: Any, import_data: ImportData) -> None:
        """Populate ``destination`` in place from validated ``import_data``."""
        ...


@runtime_checkable
class ManualImporter(Protocol):
    def import_asset(self, source_path: str, import_data: ImportData) -> None:
        """Consume validated data; the importer handles its own persistence."""
        ...


class RecordStore(Protocol):
    def load_or_create(self, path: str, record_type: type[T]) -> T: ...

    def create(self, path: str, record_type: type[T]) -> T: ...

    def mark_dirty(self, record: Any) -> None: ...

    def ensure_directory(self, path: str) -> None: ...


class Notifier(Protocol):
    def notify(self, message: str) -> None: ...


class LoggingNotifier:
    """Default notifier: rejection messages go to the application log."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.log = log or logger

    def notify(self, message: str) -> None:
        self.log.error(message)
