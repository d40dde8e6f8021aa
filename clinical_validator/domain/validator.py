"""Identifier Validator Service.

This module provides the IdentifierValidator, which classifies a raw string
as valid or invalid for a declared healthcare data type and produces
actionable diagnostics.

Security Impact:
    - Raw values (SSNs, phone numbers, dates of birth) are never logged;
      only data types and verdicts are
    - Unexpected failures degrade to an invalid result instead of leaking a
      stack trace to the caller

Architecture:
    - Pure domain service: no I/O, no shared mutable state
    - Dispatch by DataType through the rule registries in ``rules``
    - ``check`` returns a typed Result; ``validate`` and ``validate_record``
      always return well-formed result models
"""

import logging
from datetime import date
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from clinical_validator.domain.enums import DataType, RecordMode
from clinical_validator.domain.models import (
    RecordSummary,
    RecordValidationResult,
    ValidationResult,
    ValidationRules,
)
from clinical_validator.domain.ports import Result, RulesPayloadError
from clinical_validator.domain.rules import (
    DEFAULT_MAX_PLAUSIBLE_AGE,
    RULES,
    SIMPLIFIED_RULES,
    RuleContext,
)

logger = logging.getLogger(__name__)

EMPTY_VALUE_ERROR = "value is empty"

# Lower-cased record field names and the data type each one carries.
FIELD_ALIASES: dict[str, DataType] = {
    'mrn': DataType.MRN,
    'medical_record_number': DataType.MRN,
    'npi': DataType.NPI,
    'provider_id': DataType.NPI,
    'icd10': DataType.ICD10,
    'diagnosis_code': DataType.ICD10,
    'cpt': DataType.CPT,
    'procedure_code': DataType.CPT,
    'hcpcs': DataType.HCPCS,
    'date_of_birth': DataType.DATE_OF_BIRTH,
    'dob': DataType.DATE_OF_BIRTH,
    'phone': DataType.PHONE,
    'phone_number': DataType.PHONE,
    'email': DataType.EMAIL,
    'email_address': DataType.EMAIL,
    'ssn': DataType.SSN,
    'social_security_number': DataType.SSN,
    'amount': DataType.AMOUNT,
    'claim_amount': DataType.AMOUNT,
    'payment_amount': DataType.AMOUNT,
}

RulesInput = Optional[Union[ValidationRules, Mapping[str, Any]]]


def resolve_field_type(field_name: str) -> Optional[DataType]:
    """Map a record field name to its data type (case-insensitive)."""
    return FIELD_ALIASES.get(str(field_name).strip().lower())


class IdentifierValidator:
    """Validator for healthcare identifiers and demographic values.

    Supported types: MRN, NPI (with Luhn checksum), ICD-10, CPT, HCPCS,
    date of birth, phone, email, SSN and monetary amounts.

    Example Usage:
        ```python
        validator = IdentifierValidator()
        result = validator.validate("PHONE", "555-123-4567")
        result.valid        # True
        result.formatted    # "(555) 123-4567"

        record = validator.validate_record({"dob": "1985-03-15", "npi": "123"})
        record.record_valid  # False
        ```
    """

    def __init__(
        self,
        default_rules: Optional[ValidationRules] = None,
        record_mode: RecordMode = RecordMode.FULL,
        max_plausible_age: int = DEFAULT_MAX_PLAUSIBLE_AGE,
        today: Callable[[], date] = date.today,
    ):
        """Initialize the validator.

        Parameters:
            default_rules: Rules applied when a call supplies none; per-call
                rules override these key by key
            record_mode: Rule set used by ``validate_record``
            max_plausible_age: Ages above this produce a warning for
                DATE_OF_BIRTH
            today: Clock used for date-of-birth checks
        """
        self.default_rules = default_rules or ValidationRules()
        self.record_mode = RecordMode(record_mode)
        self.max_plausible_age = max_plausible_age
        self._today = today

    def resolve_rules(self, rules: RulesInput = None) -> ValidationRules:
        """Merge per-call rules over the validator defaults.

        Raises:
            RulesPayloadError: If the rules are not a mapping or hold values
                of the wrong type
        """
        if rules is None:
            return self.default_rules
        if isinstance(rules, ValidationRules):
            return rules
        if not isinstance(rules, Mapping):
            raise RulesPayloadError(f"rules must be an object, got {type(rules).__name__}")
        try:
            return ValidationRules.model_validate({**self.default_rules.model_dump(), **dict(rules)})
        except PydanticValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise RulesPayloadError(problems)

    def check(
        self,
        data_type: Union[str, DataType, None],
        raw_value: Optional[str],
        rules: RulesInput = None,
    ) -> Result[ValidationResult]:
        """Validate a value, reporting internal faults as a failed Result.

        Grammar mismatches, empty values and malformed rules are ordinary
        (successful) outcomes carrying an invalid ValidationResult. Only an
        unexpected exception produces a failure Result.

        Parameters:
            data_type: Data type tag (case-insensitive) or DataType
            raw_value: Value to validate
            rules: Optional rule overrides

        Returns:
            Result[ValidationResult]: The verdict, or the internal error
        """
        try:
            return Result.success_result(self._validate(data_type, raw_value, rules))
        except Exception as e:
            logger.error(f"Unexpected error validating {data_type}: {str(e)}", exc_info=True)
            return Result.failure_result(e, error_details={"data_type": str(data_type)})

    def validate(
        self,
        data_type: Union[str, DataType, None],
        raw_value: Optional[str],
        rules: RulesInput = None,
    ) -> ValidationResult:
        """Validate a value for a declared data type.

        Parameters:
            data_type: Data type tag (case-insensitive) or DataType
            raw_value: Value to validate
            rules: Optional rule overrides (allow_negative, max_amount, ...)

        Returns:
            ValidationResult: Always well-formed; internal faults become a
            single ``validation error: ...`` message
        """
        result = self.check(data_type, raw_value, rules)
        if result.is_success():
            return result.value
        return ValidationResult.invalid(f"validation error: {result.error}")

    def _validate(
        self,
        data_type: Union[str, DataType, None],
        raw_value: Optional[str],
        rules: RulesInput,
    ) -> ValidationResult:
        if raw_value is None or not str(raw_value).strip():
            return ValidationResult.invalid(EMPTY_VALUE_ERROR)
        value = str(raw_value).strip()

        resolved_type = data_type if isinstance(data_type, DataType) else DataType.parse(data_type)
        if resolved_type is None:
            logger.debug(f"Unknown data type requested: {data_type}")
            return ValidationResult(warnings=[f"unknown data type: {data_type}"])

        try:
            context = self._context(rules)
        except RulesPayloadError as e:
            logger.warning(f"Rejected rules payload for {resolved_type.value}: {str(e)}")
            return ValidationResult.invalid(f"invalid rules payload: {str(e)}")

        result = RULES[resolved_type](value, context)
        logger.debug(f"Validated {resolved_type.value}: valid={result.valid}")
        return result

    def _context(self, rules: RulesInput = None) -> RuleContext:
        return RuleContext(
            rules=self.resolve_rules(rules),
            today=self._today(),
            max_plausible_age=self.max_plausible_age,
        )

    def _validate_field(self, data_type: DataType, raw_value: Any) -> ValidationResult:
        value = "" if raw_value is None else str(raw_value)
        if self.record_mode == RecordMode.FULL:
            return self.validate(data_type, value)

        if not value.strip():
            return ValidationResult.invalid(EMPTY_VALUE_ERROR)
        try:
            return SIMPLIFIED_RULES[data_type](value.strip(), self._context())
        except Exception as e:
            logger.error(f"Unexpected error validating {data_type.value}: {str(e)}", exc_info=True)
            return ValidationResult.invalid(f"validation error: {str(e)}")

    def validate_record(self, fields: Mapping[str, Any]) -> RecordValidationResult:
        """Validate every recognized field of a record.

        Field names are matched case-insensitively against FIELD_ALIASES;
        unrecognized fields are skipped and do not affect the summary.

        Parameters:
            fields: Mapping of field name to value

        Returns:
            RecordValidationResult: Per-field verdicts plus totals
        """
        field_validations: dict[str, ValidationResult] = {}
        summary = RecordSummary()

        for field_name, field_value in fields.items():
            data_type = resolve_field_type(field_name)
            if data_type is None:
                continue

            result = self._validate_field(data_type, field_value)
            field_validations[field_name] = result
            summary.errors += len(result.errors)
            summary.warnings += len(result.warnings)

        logger.debug(
            f"Validated record: {len(field_validations)} of {len(fields)} fields recognized, "
            f"{summary.errors} errors, {summary.warnings} warnings"
        )
        return RecordValidationResult(field_validations=field_validations, summary=summary)
