"""Dependency injection for the HTTP API."""

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from clinical_validator.domain.validator import IdentifierValidator
from clinical_validator.main import create_validator

logger = logging.getLogger(__name__)


@lru_cache()
def get_validator() -> IdentifierValidator:
    """Get the validator instance (cached).

    The validator is stateless, so one instance serves every request.

    Returns:
        IdentifierValidator: Validator configured from the environment
    """
    logger.debug("Creating validator for API requests")
    return create_validator()


# Type alias for dependency injection
ValidatorDep = Annotated[IdentifierValidator, Depends(get_validator)]
