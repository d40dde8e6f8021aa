"""Domain layer for Clinical Validator.

This module contains the identifier rules, the validator service, the result
models and the healthcare date utilities. All domain code is pure Python with
no external dependencies beyond Pydantic.
"""

from .enums import DataType, RecordMode
from .models import (
    RecordSummary,
    RecordValidationResult,
    ValidationResult,
    ValidationRules,
)
from .validator import FIELD_ALIASES, IdentifierValidator

__all__ = [
    "DataType",
    "RecordMode",
    "RecordSummary",
    "RecordValidationResult",
    "ValidationResult",
    "ValidationRules",
    "FIELD_ALIASES",
    "IdentifierValidator",
]
