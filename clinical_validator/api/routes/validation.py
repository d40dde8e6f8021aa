"""Validation endpoints for the HTTP API."""

import logging

from fastapi import APIRouter

from clinical_validator.api.dependencies import ValidatorDep
from clinical_validator.api.models import RecordRequest, ValidateRequest
from clinical_validator.domain.models import RecordValidationResult, ValidationResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/validate", tags=["validation"])


@router.post("", response_model=ValidationResult)
async def validate_value(request: ValidateRequest, validator: ValidatorDep) -> ValidationResult:
    """Validate a single value for a declared data type.

    Invalid values are a normal outcome and return 200 with ``valid: false``;
    unknown data types return 200 with a warning.
    """
    result = validator.validate(request.data_type, request.value, request.rules)
    logger.debug(f"Validated {request.data_type}: valid={result.valid}")
    return result


@router.post("/record", response_model=RecordValidationResult)
async def validate_record(request: RecordRequest, validator: ValidatorDep) -> RecordValidationResult:
    """Validate every recognized field of a record.

    Unrecognized field names are ignored.
    """
    result = validator.validate_record(request.fields)
    logger.debug(
        f"Validated record: record_valid={result.record_valid}, "
        f"errors={result.summary.errors}, warnings={result.summary.warnings}"
    )
    return result
