"""Main FastAPI application for Clinical Validator.

This module sets up the FastAPI application with all routes, middleware,
and configuration for the validation API.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from clinical_validator.api.middleware import setup_middleware
from clinical_validator.api.routes import dates, health, reports, validation
from clinical_validator.infrastructure.logging_config import setup_logging
from clinical_validator.infrastructure.settings import settings

setup_logging(use_json=settings.json_logs, log_level=settings.log_level)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    logger.info(f"{settings.app_name} API starting up...")
    logger.info("API documentation available at /api/docs")
    logger.info(f"Logging level: {settings.log_level}")
    logger.info(f"JSON logs: {settings.json_logs}")
    yield
    logger.info(f"{settings.app_name} API shutting down...")


app = FastAPI(
    title="Clinical Validator API",
    description="Healthcare identifier validation, date utilities and report rendering",
    version=settings.app_version,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan
)

setup_middleware(app)

app.include_router(health.router)
app.include_router(validation.router)
app.include_router(dates.router)
app.include_router(reports.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Clinical Validator API",
        "version": settings.app_version,
        "docs": "/api/docs",
        "health": "/api/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "clinical_validator.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level="info"
    )
