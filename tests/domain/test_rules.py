"""Tests for the per-type identifier rules.

These tests exercise each grammar and checksum directly through the rule
registry, without the validator's trimming and dispatch.
"""

from datetime import date
from decimal import Decimal

import pytest

from clinical_validator.domain.enums import DataType
from clinical_validator.domain.models import ValidationRules
from clinical_validator.domain.ports import UnsupportedDataTypeError
from clinical_validator.domain.rules import (
    RULES,
    SIMPLIFIED_RULES,
    RuleContext,
    _assert_exhaustive,
    format_currency,
    luhn_is_valid,
    validate_amount,
    validate_date_of_birth,
    validate_npi,
    validate_phone,
    validate_ssn,
)

TODAY = date(2024, 6, 15)


@pytest.fixture
def ctx():
    """Rule context with a fixed clock and default rules."""
    return RuleContext(today=TODAY)


class TestRegistry:
    """Test suite for the rule registries."""

    def test_every_data_type_has_a_rule(self):
        """Test that both registries cover every DataType member."""
        assert set(RULES) == set(DataType)
        assert set(SIMPLIFIED_RULES) == set(DataType)

    def test_missing_handler_is_detected(self):
        """Test that an incomplete registry is rejected."""
        partial = {DataType.MRN: RULES[DataType.MRN]}
        with pytest.raises(UnsupportedDataTypeError, match="NPI") as exc_info:
            _assert_exhaustive(partial, "partial")
        assert exc_info.value.data_type == "NPI"


class TestLuhn:
    """Test suite for the Luhn checksum."""

    def test_classic_luhn_example(self):
        """Test the textbook Luhn example number."""
        assert luhn_is_valid("79927398713")
        assert not luhn_is_valid("79927398710")

    def test_issuer_prefix_changes_verdict(self):
        """Test that the 80840 prefix constant shifts the checksum."""
        assert not luhn_is_valid("1679576722")
        assert luhn_is_valid("1679576722", prefix_sum=24)


class TestNPI:
    """Test suite for NPI validation."""

    def test_plain_luhn_rejects_sample(self, ctx):
        """Test that 1234567893 fails the plain Luhn rule."""
        result = validate_npi("1234567893", ctx)
        assert not result.valid
        assert result.errors == ["NPI fails Luhn checksum validation"]

    def test_plain_luhn_accepts_constructed_value(self, ctx):
        """Test a value built to pass the plain Luhn rule."""
        assert validate_npi("1234567897", ctx).valid

    def test_issuer_prefix_rule(self):
        """Test NPI validation with the CMS card-issuer prefix enabled."""
        ctx = RuleContext(rules=ValidationRules(npi_issuer_prefix=True), today=TODAY)
        assert validate_npi("1679576722", ctx).valid
        assert validate_npi("1234567893", ctx).valid
        assert not validate_npi("1234567897", ctx).valid

    @pytest.mark.parametrize("value", ["123456789", "12345678901", "123456789A"])
    def test_wrong_shape(self, ctx, value):
        """Test that non-10-digit values fail before the checksum."""
        result = validate_npi(value, ctx)
        assert result.errors == ["NPI must be exactly 10 digits"]


class TestCodeGrammars:
    """Test suite for MRN, ICD-10, CPT, HCPCS and email grammars."""

    @pytest.mark.parametrize("data_type,value,expected", [
        (DataType.MRN, "123456", True),
        (DataType.MRN, "1234567890", True),
        (DataType.MRN, "12345", False),
        (DataType.MRN, "12345678901", False),
        (DataType.MRN, "MRN123456", False),
        (DataType.ICD10, "A12.345", True),
        (DataType.ICD10, "a12.3", True),
        (DataType.ICD10, "E11", True),
        (DataType.ICD10, "12.345", False),
        (DataType.ICD10, "A12.", False),
        (DataType.ICD10, "A12.12345", False),
        (DataType.CPT, "99213", True),
        (DataType.CPT, "9921", False),
        (DataType.CPT, "9921A", False),
        (DataType.HCPCS, "A1234", True),
        (DataType.HCPCS, "j1234", True),
        (DataType.HCPCS, "A123", False),
        (DataType.HCPCS, "12345", False),
        (DataType.EMAIL, "user@example.com", True),
        (DataType.EMAIL, "first.last+tag@mail.example.org", True),
        (DataType.EMAIL, "user@example.c", False),
        (DataType.EMAIL, "userexample.com", False),
    ])
    def test_grammar(self, ctx, data_type, value, expected):
        """Test each grammar against accepted and rejected examples."""
        result = RULES[data_type](value, ctx)
        assert result.valid is expected
        assert result.formatted is None

    def test_icd10_error_names_expected_format(self, ctx):
        """Test that the ICD-10 error shows an example code."""
        result = RULES[DataType.ICD10]("12.345", ctx)
        assert "A12.345" in result.errors[0]


class TestDateOfBirth:
    """Test suite for date of birth validation."""

    def test_iso_and_us_formats(self, ctx):
        """Test both accepted date formats."""
        assert validate_date_of_birth("1985-03-15", ctx).valid
        assert validate_date_of_birth("03/15/1985", ctx).valid

    def test_future_date_is_invalid(self, ctx):
        """Test that a birth date after today is an error."""
        result = validate_date_of_birth("2025-06-15", ctx)
        assert not result.valid
        assert "cannot be in the future" in result.errors[0]

    def test_today_is_valid(self, ctx):
        """Test that a birth date of today is accepted."""
        assert validate_date_of_birth("2024-06-15", ctx).valid

    def test_implausible_age_is_warning(self, ctx):
        """Test that a 200-year-old birth date warns but stays valid."""
        result = validate_date_of_birth("1824-06-15", ctx)
        assert result.valid
        assert result.warnings == ["age over 150 years - please verify"]

    def test_custom_plausible_age(self):
        """Test that the implausible-age threshold is configurable."""
        ctx = RuleContext(today=TODAY, max_plausible_age=100)
        result = validate_date_of_birth("1910-01-01", ctx)
        assert result.warnings == ["age over 100 years - please verify"]

    @pytest.mark.parametrize("value", ["1985-3-15", "02/30/1985", "15/03/1985", "March 15 1985", "1985/03/15"])
    def test_unparseable_dates(self, ctx, value):
        """Test that malformed or impossible dates are rejected."""
        result = validate_date_of_birth(value, ctx)
        assert result.errors == ["invalid date format (use YYYY-MM-DD or MM/DD/YYYY)"]


class TestPhone:
    """Test suite for phone validation and formatting."""

    @pytest.mark.parametrize("value,formatted", [
        ("5551234567", "(555) 123-4567"),
        ("(555) 123-4567", "(555) 123-4567"),
        ("555.123.4567", "(555) 123-4567"),
        ("15551234567", "1-(555) 123-4567"),
        ("+1 555 123 4567", "1-(555) 123-4567"),
    ])
    def test_formats(self, ctx, value, formatted):
        """Test that valid numbers are normalized."""
        result = validate_phone(value, ctx)
        assert result.valid
        assert result.formatted == formatted

    @pytest.mark.parametrize("value", ["123", "25551234567", "555123456789"])
    def test_invalid_lengths(self, ctx, value):
        """Test that wrong digit counts are rejected without a formatted value."""
        result = validate_phone(value, ctx)
        assert not result.valid
        assert result.formatted is None


class TestSSN:
    """Test suite for SSN validation."""

    def test_valid_ssn_is_formatted(self, ctx):
        """Test normalization of a valid SSN."""
        assert validate_ssn("123-45-6788", ctx).formatted == "123-45-6788"
        assert validate_ssn("123456788", ctx).formatted == "123-45-6788"

    @pytest.mark.parametrize("value", ["123-45-6789", "000000000", "000-12-3456"])
    def test_banned_patterns(self, ctx, value):
        """Test that placeholder SSNs and area 000 are rejected."""
        result = validate_ssn(value, ctx)
        assert result.errors == ["invalid SSN pattern"]
        assert result.formatted is None

    @pytest.mark.parametrize("value", ["12-345", "123 45 6788", "12345678A"])
    def test_wrong_shape(self, ctx, value):
        """Test that non-9-digit values are rejected."""
        assert validate_ssn(value, ctx).errors == ["SSN must be 9 digits (XXX-XX-XXXX)"]


class TestAmount:
    """Test suite for monetary amount validation."""

    def test_currency_string(self, ctx):
        """Test that symbols and separators are stripped and restored."""
        result = validate_amount("$1,250.75", ctx)
        assert result.valid
        assert result.formatted == "$1,250.75"

    def test_negative_allowed_by_default(self, ctx):
        """Test that negative amounts pass unless disallowed."""
        result = validate_amount("-50", ctx)
        assert result.valid
        assert result.formatted == "-$50.00"

    def test_negative_disallowed(self):
        """Test that allow_negative=False makes negatives an error."""
        ctx = RuleContext(rules=ValidationRules(allow_negative=False), today=TODAY)
        result = validate_amount("-50", ctx)
        assert not result.valid
        assert result.errors == ["negative amounts not allowed"]
        assert result.formatted == "-$50.00"

    def test_over_max_is_warning_only(self, ctx):
        """Test that exceeding max_amount only warns."""
        result = validate_amount("2000000", ctx)
        assert result.valid
        assert result.warnings == ["amount exceeds typical range: $2,000,000.00"]

    def test_custom_max_amount(self):
        """Test a caller-supplied max_amount."""
        ctx = RuleContext(rules=ValidationRules(max_amount=100.0), today=TODAY)
        assert validate_amount("150", ctx).warnings
        assert not validate_amount("100", ctx).warnings

    @pytest.mark.parametrize("value", ["abc", "12.3.4", "NaN", "Infinity", "$"])
    def test_unparseable(self, ctx, value):
        """Test that non-numbers and non-finite values are rejected."""
        result = validate_amount(value, ctx)
        assert result.errors == ["invalid amount format"]
        assert result.formatted is None

    def test_format_currency(self):
        """Test currency rendering."""
        assert format_currency(Decimal("0")) == "$0.00"
        assert format_currency(Decimal("1234567.891")) == "$1,234,567.89"
        assert format_currency(Decimal("-0.5")) == "-$0.50"

    def test_exponent_beyond_decimal_context(self, ctx):
        """Test that an overflowing exponent is reported as a bad format."""
        result = validate_amount("1e1000000", ctx)
        assert result.errors == ["invalid amount format"]
        assert result.formatted is None


class TestAsciiDigitsOnly:
    """Test suite for rejecting non-ASCII decimal digits."""

    @pytest.mark.parametrize("data_type,value", [
        (DataType.MRN, "١٢٣٤٥٦٧"),
        (DataType.MRN, "１２３４５６７"),
        (DataType.NPI, "１２３４５６７８９７"),
        (DataType.CPT, "٩٩٢١٣"),
        (DataType.HCPCS, "A١٢٣٤"),
        (DataType.ICD10, "E١١"),
        (DataType.SSN, "١٢٣-45-6788"),
        (DataType.DATE_OF_BIRTH, "١٩٨٥-03-15"),
        (DataType.PHONE, "٥٥٥١٢٣٤٥٦٧"),
    ])
    def test_non_ascii_digits_rejected(self, ctx, data_type, value):
        """Test that Arabic-Indic and fullwidth digits fail every digit grammar."""
        result = RULES[data_type](value, ctx)
        assert not result.valid
        assert result.formatted is None

    def test_phone_keeps_only_ascii_digits(self, ctx):
        """Test that non-ASCII digits are dropped rather than formatted."""
        result = validate_phone("555١234567", ctx)
        assert not result.valid
