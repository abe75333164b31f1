from __future__ import annotations

"""Exception hierarchy for the forklift import pipeline.

Rejections (format / root / read / validation) are recoverable: the import
processor catches them, reports them and returns a rejected outcome.
UnknownFieldError is a contract violation between reader and user code and is
never caught by the pipeline.
"""

__all__ = [
    "ForkliftError",
    "ImportRejected",
    "FormatError",
    "RootMismatchError",
    "ReadError",
    "ValidationError",
    "UnknownFieldError",
]


class ForkliftError(Exception):
    """Base exception for forklift."""


class ImportRejected(ForkliftError):
    """Base for errors that abort a single import without crashing the host."""

    error_type = "IMPORT_REJECTED"


class FormatError(ImportRejected):
    """Source file is not an importable workbook (wrong extension or temp file)."""

    error_type = "FORMAT_ERROR"


class RootMismatchError(ImportRejected):
    """Source path does not start with the configured project root."""

    error_type = "ROOT_MISMATCH"


class ReadError(ImportRejected):
    """Source workbook could not be read or has no usable header."""

    error_type = "READ_ERROR"


class ValidationError(ImportRejected):
    """One or more records were rejected by the validator."""

    error_type = "VALIDATION_ERROR"

    def __init__(self, message: str, messages: list[str] | None = None) -> None:
        super().__init__(message)
        self.messages: list[str] = list(messages or [])


class UnknownFieldError(ForkliftError, LookupError):
    """A field name was requested that was never set on the record."""

    def __init__(self, name: str, line_number: int) -> None:
        super().__init__(f"unknown field '{name}' (line {line_number})")
        self.name = name
        self.line_number = line_number
