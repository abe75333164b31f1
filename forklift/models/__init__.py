"""Domain models for the forklift spreadsheet import pipeline.

This package contains the record model filled by readers, the import outcome
and batch result models, and the configuration dataclasses.
"""

from .batch_result import BatchResult, FileStat
from .config_models import ImportConfig, PipelineConfig, ReaderConfig
from .error_record import ErrorRecord
from .import_data import ImportData
from .import_outcome import ImportOutcome, ImportStage, ImportStatus
from .record import Field, Record

__all__ = [
    # Configuration models
    "ImportConfig",
    "PipelineConfig",
    "ReaderConfig",
    # Record models
    "Field",
    "Record",
    "ImportData",
    # Processing models
    "ErrorRecord",
    "ImportOutcome",
    "ImportStage",
    "ImportStatus",
    "BatchResult",
    "FileStat",
]
