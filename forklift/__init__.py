"""forklift: spreadsheet -> structured record import pipeline.

Workbooks are read into ImportData, validated row by row, and handed to a
user-supplied converter that fills a record stored under the project root's
Resources directory.
"""

from .errors import (
    FormatError,
    ImportRejected,
    ReadError,
    RootMismatchError,
    UnknownFieldError,
    ValidationError,
)
from .models import Field, ImportConfig, ImportData, ImportOutcome, ImportStatus, Record
from .services.orchestrator import ImportProcessor, import_asset, process_all
from .services.validation import ValidationRunner

__version__ = "0.1.0"

__all__ = [
    "Field",
    "Record",
    "ImportData",
    "ImportConfig",
    "ImportOutcome",
    "ImportStatus",
    "ImportProcessor",
    "ValidationRunner",
    "import_asset",
    "process_all",
    "ImportRejected",
    "FormatError",
    "RootMismatchError",
    "ReadError",
    "ValidationError",
    "UnknownFieldError",
]
