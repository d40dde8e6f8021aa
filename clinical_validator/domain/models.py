"""Validation Result Schema Definitions.

This module defines the data models produced by the identifier validator and
the options that tune individual rules.

Security Impact:
    - Results never echo the raw input value back, only a normalized
      representation for types that define one (PHONE, SSN, AMOUNT)
    - Validity is derived from the error list, so a result can never claim
      to be valid while carrying errors

Architecture:
    - Pure domain models with zero infrastructure dependencies
    - Type safety enforced at runtime via Pydantic V2
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

DEFAULT_MAX_AMOUNT = 1_000_000.0


class ValidationRules(BaseModel):
    """Per-call options for validation rules.

    Unknown option names are ignored so callers can share one rules object
    across data types.

    Parameters:
        allow_negative: Whether AMOUNT values below zero are acceptable
        max_amount: AMOUNT values above this produce a warning (not an error)
        npi_issuer_prefix: Include the 80840 card-issuer prefix in the NPI
            Luhn checksum, as the CMS NPI standard does
    """

    model_config = ConfigDict(extra="ignore", frozen=True, strict=True)

    allow_negative: bool = Field(default=True, description="Allow negative AMOUNT values")
    max_amount: float = Field(
        default=DEFAULT_MAX_AMOUNT,
        description="AMOUNT values above this produce a warning"
    )
    npi_issuer_prefix: bool = Field(
        default=False,
        description="Add the 80840 issuer prefix to the NPI Luhn checksum"
    )


class ValidationResult(BaseModel):
    """Verdict for a single value.

    Parameters:
        errors: Human-readable reasons the value is invalid, in order found
        warnings: Human-readable advisories that do not affect validity
        formatted: Normalized representation (PHONE, SSN, AMOUNT only)
    """

    model_config = ConfigDict(frozen=True)

    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    formatted: Optional[str] = Field(None, description="Normalized value")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def valid(self) -> bool:
        """A value is valid exactly when no errors were recorded."""
        return not self.errors

    @classmethod
    def invalid(cls, message: str) -> "ValidationResult":
        """Build a result carrying a single error."""
        return cls(errors=[message])


class RecordSummary(BaseModel):
    """Error and warning totals across the recognized fields of a record."""

    errors: int = 0
    warnings: int = 0


class RecordValidationResult(BaseModel):
    """Verdict for a whole record of named fields.

    Parameters:
        field_validations: One ValidationResult per recognized field, keyed by
            the caller's original field name
        summary: Totals across recognized fields
        errors: Record-level problems (malformed payload); field errors are
            never copied here
    """

    field_validations: dict[str, ValidationResult] = Field(default_factory=dict)
    summary: RecordSummary = Field(default_factory=RecordSummary)
    errors: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def record_valid(self) -> bool:
        """False if any field is invalid or the record itself was unusable."""
        if self.errors:
            return False
        return all(result.valid for result in self.field_validations.values())
