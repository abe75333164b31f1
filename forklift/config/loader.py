from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_PROJECT_ROOT,
    ImportConfig,
    PipelineConfig,
    ReaderConfig,
    normalize_project_root,
)

"""Config loader.

Responsibilities:
- Load the YAML config (default: forklift.yml)
- Validate it against the bundled JSON schema
- Apply defaults and the FORKLIFT_PROJECT_ROOT environment override
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "PROJECT_ROOT_ENV",
    "SCHEMA_PATH",
    "load_config",
    "config_from_dict",
]

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("forklift.yml")
PROJECT_ROOT_ENV = "FORKLIFT_PROJECT_ROOT"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or if the
            config data violates the schema.
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def config_from_dict(data: dict[str, Any]) -> ImportConfig:
    """Build an ImportConfig from already validated data.

    Raises:
        ConfigError: If the project root (config or environment) is empty.
    """
    raw_root = os.getenv(PROJECT_ROOT_ENV) or data.get("project_root", DEFAULT_PROJECT_ROOT)
    try:
        root = normalize_project_root(raw_root)
    except ValueError as e:
        raise ConfigError(str(e)) from e
    reader_raw = data.get("reader") or {}
    reader = ReaderConfig(
        sheet=reader_raw.get("sheet"),
        header_row=reader_raw.get("header_row", 1),
        keep_na_strings=tuple(reader_raw.get("keep_na_strings", ())),
    )
    pipelines = tuple(
        PipelineConfig(
            pattern=p["pattern"],
            record_type=p["record_type"],
            converter=p["converter"],
            validator=p.get("validator"),
        )
        for p in data.get("pipelines", [])
    )
    defaults = ImportConfig()
    return ImportConfig(
        project_root=root,
        source_directory=data.get("source_directory"),
        resources_dir=data.get("resources_dir", defaults.resources_dir),
        record_extension=data.get("record_extension", defaults.record_extension),
        importable_extension=data.get("importable_extension", defaults.importable_extension),
        temp_marker=data.get("temp_marker", defaults.temp_marker),
        reader=reader,
        error_log_dir=data.get("error_log_dir", defaults.error_log_dir),
        pipelines=pipelines,
    )


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")

    _validate_config_schema(data)
    return config_from_dict(data)
