"""User code referenced by the test pipelines (``sample_app:...``)."""
from __future__ import annotations

from dataclasses import dataclass, field

from forklift.models.import_data import ImportData
from forklift.services.validation import RequiredFieldsValidator


@dataclass
class ItemTable:
    source: str = ""
    items: list[dict[str, str]] = field(default_factory=list)


class ItemConverter:
    def convert(self, destination: ItemTable, import_data: ImportData) -> None:
        destination.source = import_data.source_path
        destination.items = [
            {"id": r.get("id").value, "name": r.get("name").value, "price": r.get("price").value}
            for r in import_data
        ]


class ItemValidator(RequiredFieldsValidator):
    def __init__(self) -> None:
        super().__init__(["id", "name"])
