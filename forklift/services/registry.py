from __future__ import annotations

import fnmatch
import pkgutil
from dataclasses import dataclass
from typing import Any

from ..models.config_models import PipelineConfig
from .collaborators import Converter, Validator
from .paths import normalize_source_path
from .validation import AcceptAllValidator

"""Pipeline registry.

Turns the ``"module:attr"`` references of the config into the objects the
import processor is given. This is the only place where user code is looked
up by name; the processor itself only ever receives instances.
"""

__all__ = [
    "RegistryError",
    "Pipeline",
    "resolve_reference",
    "resolve_pipeline",
    "match_pipeline",
]


class RegistryError(Exception):
    pass


@dataclass(frozen=True)
class Pipeline:
    pattern: str
    record_type: type[Any]
    converter: Converter
    validator: Validator


def resolve_reference(reference: str) -> Any:
    try:
        return pkgutil.resolve_name(reference)
    except (ImportError, AttributeError, ValueError) as e:
        raise RegistryError(f"cannot resolve '{reference}': {e}") from e


def _instantiate(reference: str) -> Any:
    target = resolve_reference(reference)
    # クラスなら引数なしで生成、インスタンスはそのまま
    if isinstance(target, type):
        return target()
    return target


def resolve_pipeline(config: PipelineConfig) -> Pipeline:
    record_type = resolve_reference(config.record_type)
    if not isinstance(record_type, type):
        raise RegistryError(f"record_type '{config.record_type}' is not a class")
    converter = _instantiate(config.converter)
    if not isinstance(converter, Converter):
        raise RegistryError(f"converter '{config.converter}' has no convert() method")
    validator = _instantiate(config.validator) if config.validator else AcceptAllValidator()
    if not isinstance(validator, Validator):
        raise RegistryError(f"validator '{config.validator}' has no validate() method")
    return Pipeline(
        pattern=config.pattern,
        record_type=record_type,
        converter=converter,
        validator=validator,
    )


def match_pipeline(source_path: str, pipelines: list[Pipeline]) -> Pipeline | None:
    """First pipeline whose pattern matches the posix source path."""
    path = normalize_source_path(source_path)
    for pipeline in pipelines:
        if fnmatch.fnmatchcase(path, pipeline.pattern):
            return pipeline
    return None
