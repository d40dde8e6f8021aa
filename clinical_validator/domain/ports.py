"""Domain Ports - Result type and exception hierarchy.

This module defines how the domain communicates success and failure to the
outer layers (JSON entry points, CLI, HTTP API).

Architecture:
    - Result[T] carries success/failure across the internal API boundary
      without exceptions
    - Exceptions are raised inside the domain and converted to Result (or to
      a failed ValidationResult) before they reach a caller
    - Only the outermost entry points encode results as JSON text
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar, Union

T = TypeVar('T')


# ============================================================================
# Result Type for Success/Failure Communication
# ============================================================================

@dataclass(frozen=True)
class Result(Generic[T]):
    """Result type for communicating success or failure without exceptions.

    Attributes:
        success: True if the operation succeeded, False otherwise
        value: The successful result value (only present if success=True)
        error: Error message (only present if success=False)
        error_type: Type of error (RulesPayloadError, DateUtilityError, etc.)
        error_details: Additional error context (data_type, field, etc.)

    Example:
        ```python
        result = validator.check("NPI", "1234567897")
        if result.is_success():
            verdict = result.value
        else:
            logger.error(result.error)
        ```
    """

    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    error_details: Optional[dict] = None

    @classmethod
    def success_result(cls, value: T) -> 'Result[T]':
        return cls(success=True, value=value)

    @classmethod
    def failure_result(
        cls,
        error: Union[str, Exception],
        error_type: Optional[str] = None,
        error_details: Optional[dict] = None
    ) -> 'Result[T]':
        """Wrap an error; ``error_type`` defaults to the exception class name."""
        if isinstance(error, Exception):
            return cls(
                success=False,
                error=str(error),
                error_type=error_type or type(error).__name__,
                error_details=error_details or {},
            )
        return cls(
            success=False,
            error=error,
            error_type=error_type or "UnknownError",
            error_details=error_details or {},
        )

    def is_success(self) -> bool:
        return self.success

    def is_failure(self) -> bool:
        return not self.success


# ============================================================================
# Custom Exception Hierarchy
# ============================================================================

class ValidatorError(Exception):
    """Base exception for all validator-related errors."""
    pass


class RulesPayloadError(ValidatorError):
    """Raised when a validation rules payload cannot be understood.

    Attributes:
        payload: The raw payload that failed to parse (may be truncated)
    """

    def __init__(self, message: str, payload: Optional[str] = None):
        super().__init__(message)
        self.payload = payload[:200] if payload else payload


class DateUtilityError(ValidatorError, ValueError):
    """Raised when a date calculation cannot be performed.

    Covers unparseable dates, inverted ranges and unknown interval types.
    """
    pass


class UnsupportedDataTypeError(ValidatorError):
    """Raised when a rule is requested for a data type with no handler.

    Attributes:
        data_type: The data type tag that has no handler
    """

    def __init__(self, message: str, data_type: Optional[str] = None):
        super().__init__(message)
        self.data_type = data_type
