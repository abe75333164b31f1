from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Any, TypeVar

import yaml

"""File-backed record store.

Destination records are plain Python objects (dataclasses or classes with a
no-argument constructor). They are persisted as YAML mappings of their
attributes at the resolved destination path, e.g. ``Assets/Resources/items.asset``.

Loading never returns None: a missing file yields a freshly created record.
Converted records are only marked dirty; ``save_dirty()`` writes them out.
"""

__all__ = [
    "RecordStoreError",
    "YamlRecordStore",
    "record_to_dict",
]

T = TypeVar("T")

logger = logging.getLogger(__name__)


class RecordStoreError(Exception):
    """Raised when a stored record cannot be loaded or written."""


def record_to_dict(record: Any) -> dict[str, Any]:
    if dataclasses.is_dataclass(record) and not isinstance(record, type):
        return dataclasses.asdict(record)
    return {k: v for k, v in vars(record).items() if not k.startswith("_")}


class YamlRecordStore:
    """RecordStore collaborator writing YAML files below ``base_dir``."""

    def __init__(self, base_dir: Path | str = ".") -> None:
        self.base_dir = Path(base_dir)
        self._tracked: dict[str, Any] = {}  # destination path -> record
        self._dirty: dict[str, Any] = {}

    def _full_path(self, path: str) -> Path:
        return self.base_dir / path

    def ensure_directory(self, path: str) -> None:
        self._full_path(path).mkdir(parents=True, exist_ok=True)

    def create(self, path: str, record_type: type[T]) -> T:
        """Create an empty record and write it immediately."""
        record = record_type()
        self._tracked[path] = record
        self._write(path, record)
        logger.debug(f"created {record_type.__name__} record at {path}")
        return record

    def load(self, path: str, record_type: type[T]) -> T | None:
        full = self._full_path(path)
        if not full.exists():
            return None
        try:
            data = yaml.safe_load(full.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise RecordStoreError(f"invalid record file {path}: {e}") from e
        if not isinstance(data, dict):
            raise RecordStoreError(f"record file {path} does not hold a mapping")
        record = record_type()
        for key, value in data.items():
            setattr(record, key, value)
        self._tracked[path] = record
        return record

    def load_or_create(self, path: str, record_type: type[T]) -> T:
        record = self.load(path, record_type)
        if record is None:
            record = self.create(path, record_type)
        return record

    def path_of(self, record: Any) -> str | None:
        for path, tracked in self._tracked.items():
            if tracked is record:
                return path
        return None

    def mark_dirty(self, record: Any) -> None:
        path = self.path_of(record)
        if path is None:
            raise RecordStoreError(f"record {record!r} was not loaded or created by this store")
        self._dirty[path] = record

    @property
    def dirty_paths(self) -> list[str]:
        return list(self._dirty)

    def save_dirty(self) -> list[str]:
        """Write every dirty record. Returns the written paths."""
        written = []
        for path, record in self._dirty.items():
            self._write(path, record)
            written.append(path)
        self._dirty.clear()
        return written

    def _write(self, path: str, record: Any) -> None:
        full = self._full_path(path)
        full.parent.mkdir(parents=True, exist_ok=True)
        try:
            text = yaml.safe_dump(record_to_dict(record), allow_unicode=True, sort_keys=False)
        except yaml.YAMLError as e:
            raise RecordStoreError(f"cannot serialize record for {path}: {e}") from e
        full.write_text(text, encoding="utf-8")
