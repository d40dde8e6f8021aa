"""Main entry point for Clinical Validator.

This module wires configuration into the domain: it builds the
IdentifierValidator the entry points, CLI and HTTP API share, and exposes
``main`` for ``python -m clinical_validator``.
"""

import logging
from typing import Optional

from clinical_validator.domain.validator import IdentifierValidator
from clinical_validator.infrastructure.config_manager import ValidatorConfig
from clinical_validator.infrastructure.settings import settings

logger = logging.getLogger(__name__)


def create_validator(config: Optional[ValidatorConfig] = None) -> IdentifierValidator:
    """Create an IdentifierValidator from configuration.

    Parameters:
        config: Validator configuration (loaded from the environment if None)

    Returns:
        IdentifierValidator: Configured validator instance
    """
    config = config or settings.validator_config
    logger.debug(
        f"Creating validator: record_mode={config.record_mode.value}, "
        f"max_amount={config.max_amount}, max_plausible_age={config.max_plausible_age}"
    )
    return IdentifierValidator(
        default_rules=config.default_rules(),
        record_mode=config.record_mode,
        max_plausible_age=config.max_plausible_age,
    )


def main() -> None:
    """Run the command-line interface."""
    from clinical_validator.cli import app
    app()


if __name__ == "__main__":
    main()
