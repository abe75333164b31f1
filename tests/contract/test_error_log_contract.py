from __future__ import annotations

import json
from pathlib import Path

from forklift.cli import main as cli_main

"""Error log contract: JSON Lines, fixed keys, one line per invalid row."""

KEYS = {"timestamp", "file", "row", "error_type", "message"}


def _log_lines(workdir: Path) -> list[dict]:
    logs = sorted((workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    return [json.loads(line) for line in logs[0].read_text(encoding="utf-8").splitlines()]


def test_validation_errors_are_logged_per_row(temp_workdir: Path, write_config, make_workbook, capsys):
    make_workbook(
        temp_workdir / "Assets/Data/Sheets/items.xlsx",
        [
            ["id", "name", "price"],
            [1, "Sword", 100],
            [2, None, 80],
            [3, "Potion", 5],
            [None, "Ghost", 1],
        ],
    )

    assert cli_main([]) == 2

    entries = _log_lines(temp_workdir)
    assert [set(e) for e in entries] == [KEYS, KEYS]
    assert [(e["row"], e["error_type"]) for e in entries] == [(3, "VALIDATION_ERROR"), (5, "VALIDATION_ERROR")]
    assert entries[0]["message"] == "error (line 3): 'name' is required"
    assert entries[1]["message"] == "error (line 5): 'id' is required"
    assert all(e["file"] == "Assets/Data/Sheets/items.xlsx" for e in entries)
    assert all(e["timestamp"].endswith("Z") for e in entries)


def test_file_level_errors_use_row_minus_one(temp_workdir: Path, write_config, capsys):
    (temp_workdir / "Assets/Data/Sheets/items.xlsx").write_bytes(b"corrupt")

    assert cli_main([]) == 2

    entries = _log_lines(temp_workdir)
    assert len(entries) == 1
    assert entries[0]["row"] == -1
    assert entries[0]["error_type"] == "READ_ERROR"


def test_explicit_paths_rejected_before_reading(temp_workdir: Path, sample_config_yaml: str, capsys):
    # パターンを広げて root 外のファイルも pipeline に一致させる
    (temp_workdir / "forklift.yml").write_text(
        sample_config_yaml.replace('"Assets/Data/Sheets/*items*.xlsx"', '"*items*.xlsx"'),
        encoding="utf-8",
    )

    assert cli_main(["Elsewhere/items.xlsx", "Assets/Data/Sheets/~$items.xlsx", "Assets/Data/items.csv"]) == 2

    entries = _log_lines(temp_workdir)
    assert [(e["file"], e["row"], e["error_type"]) for e in entries] == [
        ("Elsewhere/items.xlsx", -1, "ROOT_MISMATCH"),
        ("Assets/Data/Sheets/~$items.xlsx", -1, "FORMAT_ERROR"),
    ]
    out = capsys.readouterr().out
    assert "rejected=2" in out
    assert "skipped=1" in out
