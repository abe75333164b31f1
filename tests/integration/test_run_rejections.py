from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from forklift.config.loader import load_config
from forklift.errors import UnknownFieldError
from forklift.models.import_outcome import ImportStage, ImportStatus
from forklift.services.orchestrator import ImportProcessor, process_all
from forklift.services.registry import Pipeline
from forklift.storage.record_store import YamlRecordStore
from sample_app import ItemConverter, ItemTable, ItemValidator


def test_invalid_rows_reject_the_whole_file(temp_workdir: Path, write_config, make_workbook):
    make_workbook(
        temp_workdir / "Assets/Data/Sheets/Foo/items.xlsx",
        [
            ["id", "name", "price"],
            [1, "Sword", 100],
            [2, None, 80],
            [None, None, None],
            [4, "Potion", 5],
        ],
    )

    result = process_all(load_config(write_config))

    assert result.rejected_files == 1
    assert result.total_records == 0
    assert result.file_stats[0].status == "rejected"
    assert not (temp_workdir / "Assets/Data/Resources/Foo/items.asset").exists()

    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    entries = [json.loads(line) for line in logs[0].read_text(encoding="utf-8").splitlines()]
    # 空行 (line 4) は読み飛ばされるが行番号は維持される
    assert [(e["row"], e["message"]) for e in entries] == [(3, "error (line 3): 'name' is required")]


def test_rejection_keeps_previous_record(temp_workdir: Path, write_config, make_workbook, items_rows):
    source = make_workbook(temp_workdir / "Assets/Data/Sheets/items.xlsx", items_rows)
    process_all(load_config(write_config))
    saved = temp_workdir / "Assets/Data/Resources/items.asset"
    before = saved.read_text(encoding="utf-8")

    make_workbook(source, [["id", "name"], [1, None]])
    result = process_all(load_config(write_config))

    assert result.rejected_files == 1
    assert saved.read_text(encoding="utf-8") == before


def test_processor_outcome_for_invalid_workbook(temp_workdir: Path, write_config, make_workbook):
    source = make_workbook(
        temp_workdir / "Assets/Data/Sheets/items.xlsx",
        [["id", "name"], [1, "a"], [2, None], [3, "c"], [None, "d"], [5, "e"]],
    )
    store = YamlRecordStore()
    processor = ImportProcessor(load_config(write_config), store)

    outcome = processor.import_file(source.relative_to(temp_workdir), ItemTable, ItemValidator(), ItemConverter())

    assert outcome.status is ImportStatus.REJECTED
    assert outcome.stage is ImportStage.VALIDATE
    assert outcome.error_type == "VALIDATION_ERROR"
    assert outcome.messages == [
        "error (line 3): 'name' is required",
        "error (line 5): 'id' is required",
    ]
    assert store.dirty_paths == []
    assert not (temp_workdir / "Assets/Data/Resources").exists()


def test_corrupt_destination_mid_batch_keeps_other_imports(
    temp_workdir: Path, write_config, make_workbook, items_rows
):
    for name in ("a_items", "b_items", "c_items"):
        make_workbook(temp_workdir / f"Assets/Data/Sheets/{name}.xlsx", items_rows)
    resources = temp_workdir / "Assets/Data/Resources"
    resources.mkdir(parents=True)
    (resources / "b_items.asset").write_text("- not\n- a mapping\n", encoding="utf-8")

    result = process_all(load_config(write_config))

    assert (result.imported_files, result.rejected_files) == (2, 1)
    assert [s.status for s in result.file_stats] == ["imported", "rejected", "imported"]
    for name in ("a_items", "c_items"):
        body = yaml.safe_load((resources / f"{name}.asset").read_text(encoding="utf-8"))
        assert [item["name"] for item in body["items"]] == ["Sword", "Shield", "Potion"]
    assert (resources / "b_items.asset").read_text(encoding="utf-8") == "- not\n- a mapping\n"

    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    entries = [json.loads(line) for line in logs[0].read_text(encoding="utf-8").splitlines()]
    assert [(e["file"], e["row"], e["error_type"]) for e in entries] == [
        ("Assets/Data/Sheets/b_items.xlsx", -1, "UNEXPECTED_ERROR"),
    ]
    assert "does not hold a mapping" in entries[0]["message"]


class _ExplodingConverter:
    def convert(self, destination, import_data):
        raise RuntimeError("converter bug")


class _MissingColumnConverter:
    def convert(self, destination, import_data):
        import_data[0].get("colour")


def _pipelines(second_converter) -> list[Pipeline]:
    return [
        Pipeline("*/a_items.xlsx", ItemTable, ItemConverter(), ItemValidator()),
        Pipeline("*/b_items.xlsx", ItemTable, second_converter, ItemValidator()),
    ]


def test_converter_failure_rejects_only_that_file(temp_workdir: Path, write_config, make_workbook, items_rows):
    for name in ("a_items", "b_items"):
        make_workbook(temp_workdir / f"Assets/Data/Sheets/{name}.xlsx", items_rows)

    result = process_all(load_config(write_config), pipelines=_pipelines(_ExplodingConverter()))

    assert (result.imported_files, result.rejected_files) == (1, 1)
    assert (temp_workdir / "Assets/Data/Resources/a_items.asset").exists()
    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    entry = json.loads(logs[0].read_text(encoding="utf-8").splitlines()[0])
    assert entry["error_type"] == "UNEXPECTED_ERROR"
    assert entry["message"] == "converter bug"


def test_unknown_field_aborts_batch_but_saves_earlier_imports(
    temp_workdir: Path, write_config, make_workbook, items_rows
):
    for name in ("a_items", "b_items"):
        make_workbook(temp_workdir / f"Assets/Data/Sheets/{name}.xlsx", items_rows)

    with pytest.raises(UnknownFieldError, match="colour"):
        process_all(load_config(write_config), pipelines=_pipelines(_MissingColumnConverter()))

    body = yaml.safe_load(
        (temp_workdir / "Assets/Data/Resources/a_items.asset").read_text(encoding="utf-8")
    )
    assert len(body["items"]) == 3
