"""API route modules."""

from clinical_validator.api.routes import dates, health, reports, validation

__all__ = ["dates", "health", "reports", "validation"]
