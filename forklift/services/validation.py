from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from ..errors import ValidationError
from ..models.import_data import ImportData
from ..models.record import Record
from .collaborators import Validator

"""Validation engine.

ValidationRunner applies one validator to every record of an ImportData, in
source order, without stopping at the first failure so that every row-level
error can be reported at once.
"""

__all__ = [
    "ValidationRunner",
    "AcceptAllValidator",
    "RequiredFieldsValidator",
    "ChainValidator",
    "FunctionValidator",
]

logger = logging.getLogger(__name__)


class ValidationRunner:
    """Runs a validator over every record and reports the aggregate verdict."""

    def run(self, import_data: ImportData, validator: Validator) -> bool:
        """Validate every record. Returns True iff no record was rejected.

        Rejected records are marked invalid with the validator's message.
        Field contents are never touched.
        """
        all_valid = True
        for record in import_data:
            accepted, message = validator.validate(record)
            if not accepted:
                record.mark_invalid(message)
                all_valid = False
        logger.debug(
            f"validated {len(import_data)} records from {import_data.source_path or '<memory>'} (valid={all_valid})"
        )
        return all_valid

    def check(self, import_data: ImportData, validator: Validator) -> None:
        """Like run(), but raise ValidationError carrying every per-record message."""
        if not self.run(import_data, validator):
            messages = import_data.error_messages()
            raise ValidationError(
                f"{len(messages)} of {len(import_data)} records failed validation",
                messages,
            )


class AcceptAllValidator:
    """Accepts every record."""

    def validate(self, record: Record) -> tuple[bool, str]:
        return True, ""


class RequiredFieldsValidator:
    """Rejects a record whose required fields are empty.

    A required name that the reader never set raises UnknownFieldError: the
    column list and the validator disagree, which is a programming error.
    """

    def __init__(self, names: Iterable[str]) -> None:
        self.names = tuple(names)

    def validate(self, record: Record) -> tuple[bool, str]:
        for name in self.names:
            if record.is_empty(name):
                return False, f"'{name}' is required"
        return True, ""


class ChainValidator:
    """Runs validators in order; the first rejection wins."""

    def __init__(self, *validators: Validator) -> None:
        self.validators = validators

    def validate(self, record: Record) -> tuple[bool, str]:
        for validator in self.validators:
            accepted, message = validator.validate(record)
            if not accepted:
                return False, message
        return True, ""


class FunctionValidator:
    """Adapts a plain callable.

    The callable returns either a bool or an ``(accepted, message)`` tuple.
    """

    def __init__(self, fn: Callable[[Record], bool | tuple[bool, str]], message: str = "invalid row") -> None:
        self.fn = fn
        self.message = message

    def validate(self, record: Record) -> tuple[bool, str]:
        result = self.fn(record)
        if isinstance(result, tuple):
            return result
        return bool(result), ("" if result else self.message)
