"""Request and response models for the HTTP API."""

from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from clinical_validator.domain.enums import IntervalType


class ValidateRequest(BaseModel):
    """Single-value validation request.

    Attributes:
        data_type: Data type tag (MRN, NPI, ICD10, ...); unknown tags are
            accepted and produce a warning
        value: Raw value to validate
        rules: Optional rule overrides (allow_negative, max_amount, ...)
    """
    data_type: str = Field(..., description="Data type tag")
    value: Optional[str] = Field(None, description="Raw value to validate")
    rules: Optional[dict[str, Any]] = Field(None, description="Rule overrides")


class RecordRequest(BaseModel):
    """Whole-record validation request."""
    fields: dict[str, Any] = Field(..., description="Field name to value")


class AgeRequest(BaseModel):
    birth_date: str = Field(..., description="YYYY-MM-DD or MM/DD/YYYY")
    reference_date: Optional[str] = Field(None, description="Defaults to today")


class DateRangeRequest(BaseModel):
    start_date: str = Field(..., description="YYYY-MM-DD")
    end_date: str = Field(..., description="YYYY-MM-DD")
    interval_type: IntervalType = Field(default=IntervalType.MONTH)


class DateMetricsRequest(BaseModel):
    admit_date: str = Field(..., description="YYYY-MM-DD")
    discharge_date: Optional[str] = None
    birth_date: Optional[str] = None


class EmailReportRequest(BaseModel):
    """Data to render as an HTML email body."""
    data: Any = Field(..., description="List of records, a single record, or a scalar")
    format_type: Literal["table", "list"] = "table"
    title: str = "Data Report"
    include_summary: bool = True


class HealthResponse(BaseModel):
    """Health check response model.

    Attributes:
        status: Overall service status
        timestamp: Current timestamp
        version: Application version
        record_mode: Rule set used for whole-record validation
    """
    status: Literal["healthy", "degraded", "unhealthy"]
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: str = Field(default="1.0.0", description="Application version")
    record_mode: str
