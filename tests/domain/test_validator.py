"""Tests for IdentifierValidator.

Covers dispatch by data type, the empty-value and unknown-type paths, rules
payload handling, internal-error degradation and whole-record validation.
"""

from datetime import date

import pytest

from clinical_validator.domain import rules as rules_module
from clinical_validator.domain.enums import DataType, RecordMode
from clinical_validator.domain.models import ValidationResult, ValidationRules
from clinical_validator.domain.ports import RulesPayloadError
from clinical_validator.domain.validator import (
    EMPTY_VALUE_ERROR,
    FIELD_ALIASES,
    IdentifierValidator,
    resolve_field_type,
)

TODAY = date(2024, 6, 15)


@pytest.fixture
def validator():
    """Validator with a fixed clock."""
    return IdentifierValidator(today=lambda: TODAY)


@pytest.fixture
def simplified_validator():
    """Validator running the legacy batch rule set for records."""
    return IdentifierValidator(record_mode=RecordMode.SIMPLIFIED, today=lambda: TODAY)


class TestSingleValue:
    """Test suite for single-value validation."""

    @pytest.mark.parametrize("data_type,value", [
        ("MRN", "1234567"),
        ("NPI", "1234567897"),
        ("ICD10", "A12.345"),
        ("CPT", "99213"),
        ("HCPCS", "A1234"),
        ("DATE_OF_BIRTH", "1985-03-15"),
        ("PHONE", "555-123-4567"),
        ("EMAIL", "user@example.com"),
        ("SSN", "123-45-6788"),
        ("AMOUNT", "$1,250.75"),
    ])
    def test_valid_values(self, validator, data_type, value):
        """Test one valid sample per data type."""
        result = validator.validate(data_type, value)
        assert result.valid
        assert result.errors == []

    def test_type_tag_is_case_insensitive(self, validator):
        """Test that lower-case and alternate spellings resolve."""
        assert validator.validate("npi", "1234567893").errors == ["NPI fails Luhn checksum validation"]
        assert validator.validate("icd-10", "A12").valid
        assert validator.validate("dob", "1985-03-15").valid
        assert validator.validate(DataType.CPT, "99213").valid

    def test_value_is_trimmed(self, validator):
        """Test that surrounding whitespace is ignored."""
        result = validator.validate("PHONE", "  5551234567\n")
        assert result.formatted == "(555) 123-4567"

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_empty_value(self, validator, value):
        """Test that empty values fail before type dispatch."""
        result = validator.validate("MRN", value)
        assert not result.valid
        assert result.errors == [EMPTY_VALUE_ERROR]

    def test_empty_value_wins_over_unknown_type(self, validator):
        """Test that emptiness is checked before the type tag."""
        assert validator.validate("FOO", "").errors == [EMPTY_VALUE_ERROR]

    def test_unknown_type_is_valid_with_warning(self, validator):
        """Test that an unrecognized type tag only warns."""
        result = validator.validate("FOO", "anything")
        assert result.valid
        assert result.warnings == ["unknown data type: FOO"]

    def test_valid_iff_no_errors(self, validator):
        """Test that validity always matches the error list."""
        samples = [("AMOUNT", "2000000"), ("SSN", "000-12-3456"), ("FOO", "x"), ("MRN", "")]
        for data_type, value in samples:
            result = validator.validate(data_type, value)
            assert result.valid == (len(result.errors) == 0)

    def test_validation_is_idempotent(self, validator):
        """Test that repeated calls return equal results."""
        first = validator.validate("AMOUNT", "2000000")
        second = validator.validate("AMOUNT", "2000000")
        assert first == second
        assert first.model_dump() == second.model_dump()

    def test_future_birth_date_uses_injected_clock(self):
        """Test that the validator consults its clock, not the system date."""
        early = IdentifierValidator(today=lambda: date(2000, 1, 1))
        assert not early.validate("DATE_OF_BIRTH", "2010-01-01").valid

    def test_max_plausible_age(self):
        """Test that the validator passes its age threshold to the rule."""
        validator = IdentifierValidator(max_plausible_age=90, today=lambda: TODAY)
        result = validator.validate("DATE_OF_BIRTH", "1920-01-01")
        assert result.warnings == ["age over 90 years - please verify"]

    def test_serialized_result_carries_valid(self, validator):
        """Test that the computed valid flag is part of the serialized form."""
        dumped = validator.validate("PHONE", "5551234567").model_dump()
        assert dumped == {
            "errors": [],
            "warnings": [],
            "formatted": "(555) 123-4567",
            "valid": True,
        }


class TestRules:
    """Test suite for rules payload handling."""

    def test_rules_override_defaults(self, validator):
        """Test per-call rules for AMOUNT."""
        result = validator.validate("AMOUNT", "-50", {"allow_negative": False})
        assert result.errors == ["negative amounts not allowed"]
        assert validator.validate("AMOUNT", "150", {"max_amount": 100}).warnings

    def test_unknown_rule_keys_are_ignored(self, validator):
        """Test that extra option names do not break validation."""
        assert validator.validate("AMOUNT", "10", {"currency": "EUR"}).valid

    def test_rules_merge_over_validator_defaults(self):
        """Test that omitted keys keep the validator defaults."""
        validator = IdentifierValidator(default_rules=ValidationRules(allow_negative=False))
        assert not validator.validate("AMOUNT", "-5", {"max_amount": 10}).valid

    def test_rules_model_is_used_as_is(self, validator):
        """Test passing a ValidationRules instance."""
        result = validator.validate("NPI", "1679576722", ValidationRules(npi_issuer_prefix=True))
        assert result.valid

    def test_wrong_typed_rule_value(self, validator):
        """Test that a mistyped option yields an invalid-rules error."""
        result = validator.validate("AMOUNT", "10", {"allow_negative": "no"})
        assert not result.valid
        assert result.errors[0].startswith("invalid rules payload:")
        assert "allow_negative" in result.errors[0]

    def test_non_mapping_rules(self, validator):
        """Test that a list is not accepted as rules."""
        result = validator.validate("AMOUNT", "10", [1, 2])
        assert result.errors == ["invalid rules payload: rules must be an object, got list"]

    def test_resolve_rules_raises(self, validator):
        """Test that resolve_rules raises the domain error directly."""
        with pytest.raises(RulesPayloadError):
            validator.resolve_rules({"max_amount": "lots"})
        assert validator.resolve_rules(None) is validator.default_rules


class TestInternalErrors:
    """Test suite for degradation when a rule fails unexpectedly."""

    @pytest.fixture
    def broken_mrn_rule(self, monkeypatch):
        def explode(value, ctx):
            raise RuntimeError("boom")
        monkeypatch.setitem(rules_module.RULES, DataType.MRN, explode)

    def test_check_returns_failure(self, validator, broken_mrn_rule):
        """Test that check reports the exception as a failed Result."""
        result = validator.check("MRN", "1234567")
        assert result.is_failure()
        assert result.error == "boom"
        assert result.error_type == "RuntimeError"
        assert result.error_details == {"data_type": "MRN"}

    def test_validate_degrades_to_invalid(self, validator, broken_mrn_rule):
        """Test that validate turns the exception into a single error."""
        result = validator.validate("MRN", "1234567")
        assert result == ValidationResult(errors=["validation error: boom"])

    def test_record_degrades_per_field(self, validator, broken_mrn_rule):
        """Test that one failing rule does not stop the record."""
        result = validator.validate_record({"mrn": "1234567", "cpt": "99213"})
        assert result.field_validations["mrn"].errors == ["validation error: boom"]
        assert result.field_validations["cpt"].valid
        assert result.summary.errors == 1


class TestFieldAliases:
    """Test suite for record field name resolution."""

    @pytest.mark.parametrize("name,data_type", [
        ("MRN", DataType.MRN),
        ("Medical_Record_Number", DataType.MRN),
        ("provider_id", DataType.NPI),
        ("diagnosis_code", DataType.ICD10),
        ("procedure_code", DataType.CPT),
        ("DOB", DataType.DATE_OF_BIRTH),
        ("phone_number", DataType.PHONE),
        ("email_address", DataType.EMAIL),
        ("social_security_number", DataType.SSN),
        ("payment_amount", DataType.AMOUNT),
    ])
    def test_aliases(self, name, data_type):
        """Test case-insensitive alias lookup."""
        assert resolve_field_type(name) == data_type

    def test_unknown_field(self):
        """Test that unmapped names resolve to None."""
        assert resolve_field_type("favorite_color") is None

    def test_every_type_has_an_alias(self):
        """Test that every data type can appear in a record."""
        assert set(FIELD_ALIASES.values()) == set(DataType)


class TestRecordValidation:
    """Test suite for whole-record validation."""

    def test_mixed_record(self, validator):
        """Test a record with valid, invalid, warning and unknown fields."""
        record = {
            "MRN": "1234567",
            "DOB": "1985-03-15",
            "npi": "1234567893",
            "favorite_color": "blue",
            "claim_amount": "2000000",
        }
        result = validator.validate_record(record)

        assert list(result.field_validations) == ["MRN", "DOB", "npi", "claim_amount"]
        assert result.field_validations["npi"].errors == ["NPI fails Luhn checksum validation"]
        assert result.field_validations["claim_amount"].formatted == "$2,000,000.00"
        assert result.summary.errors == 1
        assert result.summary.warnings == 1
        assert result.errors == []
        assert result.record_valid is False

    def test_all_valid_record(self, validator):
        """Test that a clean record is valid."""
        result = validator.validate_record({"mrn": "1234567", "phone": "5551234567"})
        assert result.record_valid
        assert result.summary.errors == 0

    def test_warnings_do_not_invalidate_record(self, validator):
        """Test that warnings alone keep the record valid."""
        result = validator.validate_record({"amount": "5000000"})
        assert result.record_valid
        assert result.summary.warnings == 1

    def test_empty_record(self, validator):
        """Test that a record with no recognized fields is valid."""
        result = validator.validate_record({"notes": "follow up"})
        assert result.field_validations == {}
        assert result.record_valid

    def test_none_and_non_string_values(self, validator):
        """Test that None is empty and numbers are stringified."""
        result = validator.validate_record({"mrn": 1234567, "cpt": None})
        assert result.field_validations["mrn"].valid
        assert result.field_validations["cpt"].errors == [EMPTY_VALUE_ERROR]

    def test_record_matches_single_value_rules(self, validator):
        """Test that full mode applies the same rules as validate."""
        record = {"phone": "123", "ssn": "123456788", "email": "bad"}
        result = validator.validate_record(record)
        assert result.field_validations["phone"] == validator.validate("PHONE", "123")
        assert result.field_validations["ssn"] == validator.validate("SSN", "123456788")
        assert result.field_validations["email"] == validator.validate("EMAIL", "bad")

    def test_summary_counts_match_fields(self, validator):
        """Test that summary totals equal the per-field sums."""
        record = {"mrn": "12", "npi": "abc", "amount": "9999999", "dob": "1800-01-01"}
        result = validator.validate_record(record)
        fields = result.field_validations.values()
        assert result.summary.errors == sum(len(r.errors) for r in fields)
        assert result.summary.warnings == sum(len(r.warnings) for r in fields)


class TestSimplifiedMode:
    """Test suite for the legacy batch rule set."""

    def test_npi_checked_for_shape_only(self, simplified_validator):
        """Test that simplified mode skips the Luhn checksum."""
        result = simplified_validator.validate_record({"npi": "1234567893"})
        assert result.record_valid
        assert not simplified_validator.validate_record({"npi": "12345"}).record_valid

    def test_other_types_pass(self, simplified_validator):
        """Test that types without a simplified rule are accepted."""
        result = simplified_validator.validate_record(
            {"phone": "123", "email": "bad", "ssn": "000000000"}
        )
        assert result.record_valid
        assert all(r.formatted is None for r in result.field_validations.values())

    def test_mrn_and_icd10_still_checked(self, simplified_validator):
        """Test the grammars kept by simplified mode."""
        result = simplified_validator.validate_record({"mrn": "12", "icd10": "bad"})
        assert result.summary.errors == 2

    def test_empty_field(self, simplified_validator):
        """Test that empty values are still errors."""
        result = simplified_validator.validate_record({"email": "  "})
        assert result.field_validations["email"].errors == [EMPTY_VALUE_ERROR]

    def test_single_value_unaffected(self, simplified_validator):
        """Test that record mode does not change validate."""
        assert not simplified_validator.validate("NPI", "1234567893").valid
