"""Healthcare date utility endpoints for the HTTP API."""

import logging

from fastapi import APIRouter, HTTPException

from clinical_validator.api.models import AgeRequest, DateMetricsRequest, DateRangeRequest
from clinical_validator.domain import datetime_utils
from clinical_validator.domain.datetime_utils import AgeResult, DateMetrics, DateRange
from clinical_validator.domain.ports import DateUtilityError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dates", tags=["dates"])


@router.post("/age", response_model=AgeResult)
async def calculate_age(request: AgeRequest) -> AgeResult:
    """Age in days, weeks, months and years, plus age group."""
    try:
        return datetime_utils.calculate_age(request.birth_date, request.reference_date)
    except DateUtilityError as e:
        logger.warning(f"Age calculation rejected: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/range", response_model=DateRange)
async def create_date_range(request: DateRangeRequest) -> DateRange:
    """Split a date window into day/week/month/quarter/year periods."""
    try:
        return datetime_utils.create_date_range(
            request.start_date, request.end_date, request.interval_type
        )
    except DateUtilityError as e:
        logger.warning(f"Date range rejected: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/metrics", response_model=DateMetrics, response_model_exclude_none=True)
async def healthcare_date_metrics(request: DateMetricsRequest) -> DateMetrics:
    """Length of stay, age at admission and admission timing."""
    try:
        return datetime_utils.healthcare_date_metrics(
            request.admit_date, request.discharge_date, request.birth_date
        )
    except DateUtilityError as e:
        logger.warning(f"Date metrics rejected: {str(e)}")
        raise HTTPException(status_code=400, detail=str(e))
