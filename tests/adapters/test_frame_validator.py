"""Tests for DataFrame batch validation."""

from datetime import date

import pandas as pd
import pytest

from clinical_validator.adapters.frame_validator import RESULT_COLUMNS, validate_dataframe
from clinical_validator.domain.enums import RecordMode
from clinical_validator.domain.validator import IdentifierValidator


@pytest.fixture
def validator():
    """Validator with a fixed clock."""
    return IdentifierValidator(today=lambda: date(2024, 6, 15))


class TestValidateDataFrame:
    """Test suite for validate_dataframe."""

    def test_rows_are_validated(self, validator):
        """Test per-row verdicts, counts and messages."""
        df = pd.DataFrame({
            "mrn": ["1234567", "12"],
            "npi": ["1234567897", "1234567893"],
            "notes": ["follow up", "none"],
        })
        results = validate_dataframe(df, validator)

        assert list(results.columns) == RESULT_COLUMNS
        assert results.loc[0, "record_valid"]
        assert results.loc[0, "errors"] == 0
        assert not results.loc[1, "record_valid"]
        assert results.loc[1, "errors"] == 2
        assert results.loc[1, "messages"] == [
            "mrn: MRN must be 6-10 digits",
            "npi: NPI fails Luhn checksum validation",
        ]

    def test_warnings_listed_after_errors(self, validator):
        """Test message ordering within a row."""
        df = pd.DataFrame({"claim_amount": ["5000000"], "cpt": ["1"]})
        messages = validate_dataframe(df, validator).loc[0, "messages"]
        assert messages == [
            "cpt: CPT code must be exactly 5 digits",
            "claim_amount: amount exceeds typical range: $5,000,000.00",
        ]

    def test_missing_cells_are_empty(self, validator):
        """Test that None cells fail as empty values."""
        df = pd.DataFrame({"mrn": ["1234567", None]})
        results = validate_dataframe(df, validator)
        assert results.loc[1, "messages"] == ["mrn: value is empty"]

    def test_index_is_preserved(self, validator):
        """Test that results line up with the input rows."""
        df = pd.DataFrame({"email": ["a@example.com", "bad"]}, index=["p1", "p2"])
        results = validate_dataframe(df, validator)
        assert list(results.index) == ["p1", "p2"]
        assert results.loc["p1", "record_valid"]
        assert not results.loc["p2", "record_valid"]

    def test_simplified_mode(self):
        """Test that the validator's record mode applies to every row."""
        validator = IdentifierValidator(record_mode=RecordMode.SIMPLIFIED)
        df = pd.DataFrame({"npi": ["1234567893"], "phone": ["123"]})
        assert validate_dataframe(df, validator).loc[0, "record_valid"]

    def test_empty_frame(self, validator):
        """Test an empty input frame."""
        results = validate_dataframe(pd.DataFrame({"mrn": []}), validator)
        assert results.empty
        assert list(results.columns) == RESULT_COLUMNS
