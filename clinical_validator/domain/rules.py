"""Identifier Rules - one grammar or checksum per healthcare data type.

Each rule takes an already-trimmed, non-empty value plus a RuleContext and
returns a ValidationResult. Rules are pure: the only source of time is the
context's ``today``.

The RULES registry maps every DataType member to its handler. A missing
handler is a programming error and is detected when this module is imported.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation, Overflow
from typing import Callable

from clinical_validator.domain.datetime_utils import DOB_FORMATS, parse_date
from clinical_validator.domain.enums import DataType
from clinical_validator.domain.models import ValidationResult, ValidationRules
from clinical_validator.domain.ports import DateUtilityError, UnsupportedDataTypeError

# Sum contributed by the constant "80840" card-issuer prefix once it is run
# through the Luhn doubling step.
NPI_ISSUER_PREFIX_SUM = 24

DEFAULT_MAX_PLAUSIBLE_AGE = 150

MRN_PATTERN = re.compile(r'^[0-9]{6,10}$')
NPI_PATTERN = re.compile(r'^[0-9]{10}$')
ICD10_PATTERN = re.compile(r'^[A-Z][0-9]{2}(\.[A-Z0-9]{1,4})?$')
CPT_PATTERN = re.compile(r'^[0-9]{5}$')
HCPCS_PATTERN = re.compile(r'^[A-Z][0-9]{4}$')
EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')
SSN_PATTERN = re.compile(r'^[0-9]{9}$')
NON_DIGITS = re.compile(r'[^0-9]')
CURRENCY_NOISE = re.compile(r'[$,]')

BANNED_SSNS = frozenset({"000000000", "123456789"})


@dataclass(frozen=True)
class RuleContext:
    """Inputs every rule may consult besides the value itself."""
    rules: ValidationRules = field(default_factory=ValidationRules)
    today: date = field(default_factory=date.today)
    max_plausible_age: int = DEFAULT_MAX_PLAUSIBLE_AGE


RuleHandler = Callable[[str, RuleContext], ValidationResult]


def luhn_is_valid(digits: str, prefix_sum: int = 0) -> bool:
    """Check a digit string whose last digit is a Luhn check digit.

    Walking the payload digits from the right, every digit at an even index
    (0-based) is doubled, with 9 subtracted from doubled values above 9.

    Parameters:
        digits: Digit string including the trailing check digit
        prefix_sum: Constant added to the checksum for an implied prefix

    Returns:
        bool: True if the checksum is a multiple of 10
    """
    values = [int(d) for d in digits]
    check_digit = values[-1]
    checksum = prefix_sum
    for i, digit in enumerate(reversed(values[:-1])):
        if i % 2 == 0:
            digit *= 2
            if digit > 9:
                digit -= 9
        checksum += digit
    return (checksum + check_digit) % 10 == 0


def validate_mrn(value: str, ctx: RuleContext) -> ValidationResult:
    if not MRN_PATTERN.match(value):
        return ValidationResult.invalid("MRN must be 6-10 digits")
    return ValidationResult()


def validate_npi_format(value: str, ctx: RuleContext) -> ValidationResult:
    if not NPI_PATTERN.match(value):
        return ValidationResult.invalid("NPI must be exactly 10 digits")
    return ValidationResult()


def validate_npi(value: str, ctx: RuleContext) -> ValidationResult:
    """Validate an NPI: ten digits with a valid Luhn check digit."""
    result = validate_npi_format(value, ctx)
    if not result.valid:
        return result
    prefix_sum = NPI_ISSUER_PREFIX_SUM if ctx.rules.npi_issuer_prefix else 0
    if not luhn_is_valid(value, prefix_sum=prefix_sum):
        return ValidationResult.invalid("NPI fails Luhn checksum validation")
    return ValidationResult()


def validate_icd10(value: str, ctx: RuleContext) -> ValidationResult:
    if not ICD10_PATTERN.match(value.upper()):
        return ValidationResult.invalid("ICD-10 code format invalid (e.g., A12.345)")
    return ValidationResult()


def validate_cpt(value: str, ctx: RuleContext) -> ValidationResult:
    if not CPT_PATTERN.match(value):
        return ValidationResult.invalid("CPT code must be exactly 5 digits")
    return ValidationResult()


def validate_hcpcs(value: str, ctx: RuleContext) -> ValidationResult:
    if not HCPCS_PATTERN.match(value.upper()):
        return ValidationResult.invalid("HCPCS code format invalid (e.g., A1234)")
    return ValidationResult()


def validate_date_of_birth(value: str, ctx: RuleContext) -> ValidationResult:
    """Validate a date of birth against the context's notion of today.

    A birth date after today is an error. An implied age above
    ``ctx.max_plausible_age`` years is only a warning.
    """
    try:
        birth_date = parse_date(value, DOB_FORMATS)
    except DateUtilityError:
        return ValidationResult.invalid("invalid date format (use YYYY-MM-DD or MM/DD/YYYY)")

    if birth_date > ctx.today:
        return ValidationResult.invalid("date of birth cannot be in the future")

    age = (ctx.today - birth_date).days / 365.25
    if age > ctx.max_plausible_age:
        return ValidationResult(
            warnings=[f"age over {ctx.max_plausible_age} years - please verify"]
        )
    return ValidationResult()


def validate_phone(value: str, ctx: RuleContext) -> ValidationResult:
    digits = NON_DIGITS.sub('', value)
    if len(digits) == 10:
        return ValidationResult(formatted=f"({digits[:3]}) {digits[3:6]}-{digits[6:]}")
    if len(digits) == 11 and digits[0] == '1':
        return ValidationResult(formatted=f"1-({digits[1:4]}) {digits[4:7]}-{digits[7:]}")
    return ValidationResult.invalid("phone number must be 10 digits (or 11 with country code)")


def validate_email(value: str, ctx: RuleContext) -> ValidationResult:
    if not EMAIL_PATTERN.match(value):
        return ValidationResult.invalid("invalid email format")
    return ValidationResult()


def validate_ssn(value: str, ctx: RuleContext) -> ValidationResult:
    """Validate an SSN and normalize it to XXX-XX-XXXX.

    Known placeholder numbers and the unassigned 000 area are rejected.
    """
    digits = value.replace('-', '')
    if not SSN_PATTERN.match(digits):
        return ValidationResult.invalid("SSN must be 9 digits (XXX-XX-XXXX)")
    if digits in BANNED_SSNS or digits[:3] == '000':
        return ValidationResult.invalid("invalid SSN pattern")
    return ValidationResult(formatted=f"{digits[:3]}-{digits[3:5]}-{digits[5:]}")


def format_currency(amount: Decimal) -> str:
    """Render an amount as a dollar string, e.g. ``$1,250.75`` or ``-$50.00``."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def validate_amount(value: str, ctx: RuleContext) -> ValidationResult:
    """Validate a monetary amount.

    A negative amount is an error only when ``allow_negative`` is false.
    Exceeding ``max_amount`` is a warning. Once the number parses, the
    formatted currency string is always returned.
    """
    cleaned = CURRENCY_NOISE.sub('', value)
    try:
        amount = Decimal(cleaned)
        if not amount.is_finite():
            return ValidationResult.invalid("invalid amount format")
        # Exponents beyond the decimal context overflow here.
        formatted = format_currency(amount)
    except (InvalidOperation, Overflow):
        return ValidationResult.invalid("invalid amount format")

    errors: list[str] = []
    warnings: list[str] = []
    if amount < 0 and not ctx.rules.allow_negative:
        errors.append("negative amounts not allowed")
    elif amount > Decimal(str(ctx.rules.max_amount)):
        warnings.append(f"amount exceeds typical range: {formatted}")

    return ValidationResult(errors=errors, warnings=warnings, formatted=formatted)


def accept(value: str, ctx: RuleContext) -> ValidationResult:
    """Accept any non-empty value."""
    return ValidationResult()


RULES: dict[DataType, RuleHandler] = {
    DataType.MRN: validate_mrn,
    DataType.NPI: validate_npi,
    DataType.ICD10: validate_icd10,
    DataType.CPT: validate_cpt,
    DataType.HCPCS: validate_hcpcs,
    DataType.DATE_OF_BIRTH: validate_date_of_birth,
    DataType.PHONE: validate_phone,
    DataType.EMAIL: validate_email,
    DataType.SSN: validate_ssn,
    DataType.AMOUNT: validate_amount,
}

# Legacy batch behaviour: grammar checks for three types, everything else passes.
SIMPLIFIED_RULES: dict[DataType, RuleHandler] = {
    data_type: accept for data_type in DataType
}
SIMPLIFIED_RULES.update({
    DataType.MRN: validate_mrn,
    DataType.NPI: validate_npi_format,
    DataType.ICD10: validate_icd10,
})


def _assert_exhaustive(registry: dict[DataType, RuleHandler], name: str) -> None:
    missing = [member.value for member in DataType if member not in registry]
    if missing:
        raise UnsupportedDataTypeError(
            f"{name} has no handler for: {', '.join(missing)}", data_type=missing[0]
        )


_assert_exhaustive(RULES, "RULES")
_assert_exhaustive(SIMPLIFIED_RULES, "SIMPLIFIED_RULES")
