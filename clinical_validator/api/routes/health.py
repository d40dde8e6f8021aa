"""Health check endpoint for the HTTP API."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from clinical_validator.api.dependencies import ValidatorDep
from clinical_validator.api.models import HealthResponse
from clinical_validator.infrastructure.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])

# Known-good NPI used to confirm the rule set is loaded and answering.
PROBE_NPI = "1234567897"


@router.get("/health", response_model=HealthResponse)
async def health_check(validator: ValidatorDep) -> HealthResponse:
    """Health check endpoint.

    Runs a single known-good validation through the configured validator.
    Used by monitoring tools and load balancers.
    """
    probe = validator.check("NPI", PROBE_NPI, {"npi_issuer_prefix": False})
    if probe.is_success() and probe.value.valid:
        status = "healthy"
    else:
        logger.warning(f"Health probe failed: {probe.error or probe.value}")
        status = "unhealthy"

    return HealthResponse(
        status=status,
        timestamp=datetime.now(timezone.utc),
        version=settings.app_version,
        record_mode=validator.record_mode.value,
    )
