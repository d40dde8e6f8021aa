"""JSON Entry Points.

This module is the outermost text boundary of the library: every function
takes UTF-8 strings (JSON-encoded where structured) and returns a string.
They are meant to be registered as query-engine functions or called from any
host that only exchanges text.

Security Impact:
    - No function raises; every failure is encoded in the returned payload
    - Payload contents are never logged, only their shape

Architecture:
    - Thin adapters over the domain: parse JSON, call the domain, encode the
      result model with Pydantic
    - Internal Result values are converted to JSON only here
"""

import json
import logging
from functools import lru_cache
from typing import Any, Optional

from clinical_validator.adapters import report_formatter
from clinical_validator.domain import datetime_utils
from clinical_validator.domain.models import RecordValidationResult, ValidationResult
from clinical_validator.domain.ports import DateUtilityError, Result, RulesPayloadError
from clinical_validator.domain.validator import IdentifierValidator
from clinical_validator.infrastructure.settings import settings

logger = logging.getLogger(__name__)

AGE_OUTPUT_FORMATS = ("years", "months", "days", "group")


@lru_cache()
def get_validator() -> IdentifierValidator:
    """Shared validator configured from the environment (cached)."""
    from clinical_validator.main import create_validator
    return create_validator()


def parse_json_object(payload: Optional[str], what: str = "payload") -> Result[dict]:
    """Decode a JSON object payload.

    An empty payload or JSON ``null`` decodes to an empty dict.

    Parameters:
        payload: JSON text
        what: Name used in error messages

    Returns:
        Result[dict]: The decoded object, or a failure describing why not
    """
    if payload is None or not str(payload).strip():
        return Result.success_result({})
    try:
        decoded = json.loads(payload)
    except (json.JSONDecodeError, TypeError) as e:
        return Result.failure_result(
            RulesPayloadError(f"{what} is not valid JSON: {str(e)}", payload=str(payload))
        )
    if decoded is None:
        return Result.success_result({})
    if not isinstance(decoded, dict):
        return Result.failure_result(
            RulesPayloadError(f"{what} must be a JSON object, got {type(decoded).__name__}")
        )
    return Result.success_result(decoded)


def _error_json(message: str) -> str:
    return json.dumps({"error": message})


def validate_healthcare_data(
    data_type: str,
    value: str,
    validation_rules: Optional[str] = "{}",
    validator: Optional[IdentifierValidator] = None,
) -> str:
    """Validate one value and return the JSON-encoded ValidationResult.

    Parameters:
        data_type: Data type tag (MRN, NPI, ICD10, ...)
        value: Raw value
        validation_rules: JSON object of rule options
        validator: Validator to use (defaults to the shared instance)

    Returns:
        str: ``{"errors": [...], "warnings": [...], "formatted": ..., "valid": ...}``
    """
    try:
        rules = parse_json_object(validation_rules, what="rules")
        if rules.is_failure():
            logger.warning(f"Rejected rules payload for {data_type}: {rules.error}")
            return ValidationResult.invalid(f"invalid rules payload: {rules.error}").model_dump_json()

        validator = validator or get_validator()
        return validator.validate(data_type, value, rules.value).model_dump_json()
    except Exception as e:
        logger.error(f"Unexpected error in validate_healthcare_data: {str(e)}", exc_info=True)
        return ValidationResult.invalid(f"validation error: {str(e)}").model_dump_json()


def validate_healthcare_record(
    record_json: str,
    validator: Optional[IdentifierValidator] = None,
) -> str:
    """Validate every recognized field of a JSON record.

    Parameters:
        record_json: JSON object of field name to value
        validator: Validator to use (defaults to the shared instance)

    Returns:
        str: JSON-encoded RecordValidationResult
    """
    try:
        record = parse_json_object(record_json, what="record")
        if record.is_failure():
            return RecordValidationResult(
                errors=[f"record validation error: {record.error}"]
            ).model_dump_json()

        validator = validator or get_validator()
        return validator.validate_record(record.value).model_dump_json()
    except Exception as e:
        logger.error(f"Unexpected error in validate_healthcare_record: {str(e)}", exc_info=True)
        return RecordValidationResult(errors=[f"record validation error: {str(e)}"]).model_dump_json()


def calculate_age(
    birth_date: str,
    reference_date: Optional[str] = None,
    output_format: str = "years",
) -> str:
    """Calculate age; scalar formats return plain text, anything else JSON.

    Parameters:
        birth_date: YYYY-MM-DD or MM/DD/YYYY
        reference_date: Date to measure age at (defaults to today)
        output_format: years, months, days, group, or anything else for the
            full JSON breakdown
    """
    try:
        age = datetime_utils.calculate_age(birth_date, reference_date)
    except DateUtilityError as e:
        return _error_json(f"age calculation error: {str(e)}")
    except Exception as e:
        logger.error(f"Unexpected error in calculate_age: {str(e)}", exc_info=True)
        return _error_json(f"age calculation error: {str(e)}")

    fmt = (output_format or "").strip().lower()
    if fmt == "years":
        return str(age.age_precise_years)
    if fmt == "months":
        return str(age.age_in_months)
    if fmt == "days":
        return str(age.age_in_days)
    if fmt == "group":
        return age.age_group.value
    return age.model_dump_json()


def create_date_range(
    start_date: str,
    end_date: str,
    interval_type: str = "month",
    format_output: str = "json",
) -> str:
    """Enumerate periods between two dates as JSON or ``simple`` text lines."""
    try:
        date_range = datetime_utils.create_date_range(start_date, end_date, interval_type)
    except DateUtilityError as e:
        return _error_json(f"date range error: {str(e)}")
    except Exception as e:
        logger.error(f"Unexpected error in create_date_range: {str(e)}", exc_info=True)
        return _error_json(f"date range error: {str(e)}")

    if (format_output or "").strip().lower() == "simple":
        return date_range.to_simple_text()
    return date_range.model_dump_json()


def healthcare_date_metrics(
    admit_date: str,
    discharge_date: Optional[str] = None,
    birth_date: Optional[str] = None,
) -> str:
    """Stay length, age at admission and admission timing as JSON."""
    try:
        metrics = datetime_utils.healthcare_date_metrics(admit_date, discharge_date, birth_date)
    except DateUtilityError as e:
        return _error_json(f"healthcare date metrics error: {str(e)}")
    except Exception as e:
        logger.error(f"Unexpected error in healthcare_date_metrics: {str(e)}", exc_info=True)
        return _error_json(f"healthcare date metrics error: {str(e)}")
    return metrics.model_dump_json(exclude_none=True)


def format_data_for_email(
    data_json: str,
    format_type: str = "table",
    title: str = "Data Report",
    include_summary: bool = True,
) -> str:
    """Render JSON data as an HTML email body."""
    try:
        data: Any = json.loads(data_json)
        return report_formatter.format_data_for_email(
            data,
            format_type=format_type,
            title=title,
            include_summary=include_summary,
            max_rows=settings.validator_config.report_max_rows,
        )
    except Exception as e:
        logger.error(f"Error formatting data for email: {str(e)}", exc_info=True)
        return report_formatter.error_page(f"Error formatting data: {str(e)}")


def create_executive_summary(
    data_json: str,
    analysis_type: str = "general",
    key_metrics: Optional[str] = "[]",
) -> str:
    """Render JSON data as a plain-text executive summary."""
    try:
        data: Any = json.loads(data_json)
        metrics = json.loads(key_metrics) if key_metrics else []
        if not isinstance(metrics, list):
            raise ValueError("key_metrics must be a JSON array")
        return report_formatter.create_executive_summary(
            data, analysis_type=analysis_type, key_metrics=metrics
        )
    except Exception as e:
        logger.error(f"Error creating executive summary: {str(e)}", exc_info=True)
        return f"Error creating executive summary: {str(e)}"
