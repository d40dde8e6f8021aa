"""Report rendering endpoints for the HTTP API."""

import logging

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from clinical_validator.adapters import report_formatter
from clinical_validator.api.dependencies import ValidatorDep
from clinical_validator.api.models import EmailReportRequest, RecordRequest
from clinical_validator.infrastructure.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.post("/email", response_class=HTMLResponse)
async def email_report(request: EmailReportRequest) -> HTMLResponse:
    """Render records as an HTML email body."""
    body = report_formatter.format_data_for_email(
        request.data,
        format_type=request.format_type,
        title=request.title,
        include_summary=request.include_summary,
        max_rows=settings.validator_config.report_max_rows,
    )
    return HTMLResponse(content=body)


@router.post("/validation", response_class=HTMLResponse)
async def validation_report(request: RecordRequest, validator: ValidatorDep) -> HTMLResponse:
    """Validate a record and render the verdict as HTML."""
    result = validator.validate_record(request.fields)
    return HTMLResponse(content=report_formatter.format_validation_report(result))
