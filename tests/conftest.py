# Shared pytest fixtures
from __future__ import annotations
import logging
import os
from pathlib import Path

import pandas as pd
import pytest

from forklift.config.loader import PROJECT_ROOT_ENV
from forklift.logging.init import LOGGER_NAME, reset_logging


@pytest.fixture(autouse=True)
def _isolate_env_and_logging(monkeypatch):
    monkeypatch.delenv(PROJECT_ROOT_ENV, raising=False)
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    reset_logging()
    os.environ.pop(PROJECT_ROOT_ENV, None)


@pytest.fixture()
def temp_workdir(tmp_path: Path, monkeypatch) -> Path:
    (tmp_path / "Assets" / "Data" / "Sheets").mkdir(parents=True)
    (tmp_path / "logs").mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture()
def sample_config_yaml() -> str:
    return """project_root: Assets/Data
resources_dir: Resources
record_extension: .asset
error_log_dir: logs
reader:
  header_row: 1
pipelines:
  - pattern: "Assets/Data/Sheets/*items*.xlsx"
    record_type: sample_app:ItemTable
    converter: sample_app:ItemConverter
    validator: sample_app:ItemValidator
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "forklift.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def write_workbook(path: Path, rows: list[list[object]], sheet: str = "Sheet1") -> Path:
    """Write ``rows`` verbatim (no pandas header) into a new workbook."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return path


@pytest.fixture()
def make_workbook():
    return write_workbook


@pytest.fixture()
def items_rows() -> list[list[object]]:
    return [
        ["id", "name", "price"],
        [1, "Sword", 100],
        [2, "Shield", 80],
        [3, "Potion", 5],
    ]
