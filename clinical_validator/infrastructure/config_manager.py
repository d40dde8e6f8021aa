"""Configuration Manager for validator settings.

This module loads the tunable parts of the identifier validator (amount
limits, plausible age, record mode, report sizes) from the environment or a
JSON file and validates them before use.

Architecture:
    - Infrastructure layer: the domain receives plain values, never this model
    - Type-safe configuration using Pydantic models
    - Fail-fast validation prevents runtime errors
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from clinical_validator.domain.enums import RecordMode
from clinical_validator.domain.models import DEFAULT_MAX_AMOUNT, ValidationRules
from clinical_validator.domain.rules import DEFAULT_MAX_PLAUSIBLE_AGE

logger = logging.getLogger(__name__)

ENV_PREFIX = "CV_"


class ValidatorConfig(BaseModel):
    """Validator configuration model.

    Parameters:
        max_amount: Default AMOUNT warning threshold
        allow_negative: Default for the AMOUNT allow_negative rule
        npi_issuer_prefix: Default for including the 80840 prefix in NPI checks
        max_plausible_age: Ages above this produce a DATE_OF_BIRTH warning
        record_mode: Rule set used for whole-record validation
        report_max_rows: Row limit for HTML table reports
    """

    max_amount: float = Field(default=DEFAULT_MAX_AMOUNT, description="AMOUNT warning threshold")
    allow_negative: bool = Field(default=True, description="Allow negative AMOUNT values by default")
    npi_issuer_prefix: bool = Field(default=False, description="Use the 80840 prefix in NPI checksums")
    max_plausible_age: int = Field(default=DEFAULT_MAX_PLAUSIBLE_AGE, description="Implausible-age warning threshold")
    record_mode: RecordMode = Field(default=RecordMode.FULL, description="Whole-record rule set")
    report_max_rows: int = Field(default=100, description="Maximum rows rendered in HTML tables")

    @field_validator("max_amount")
    @classmethod
    def validate_max_amount(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"max_amount must be positive. Got: {v}")
        return v

    @field_validator("max_plausible_age", "report_max_rows")
    @classmethod
    def validate_positive_int(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Value must be at least 1. Got: {v}")
        return v

    @field_validator("record_mode", mode="before")
    @classmethod
    def normalize_record_mode(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    def default_rules(self) -> ValidationRules:
        """Rules applied when a validation call supplies none."""
        return ValidationRules(
            allow_negative=self.allow_negative,
            max_amount=self.max_amount,
            npi_issuer_prefix=self.npi_issuer_prefix,
        )


class ConfigManager:
    """Configuration manager for validator settings.

    Example Usage:
        ```python
        # Load from environment variables
        config = ConfigManager.from_environment()
        validator_config = config.get_validator_config()

        # Load from file
        config = ConfigManager.from_file("validator.json")
        validator_config = config.get_validator_config()
        ```
    """

    def __init__(self, config_data: Dict[str, Any]):
        """Initialize configuration manager.

        Parameters:
            config_data: Configuration dictionary
        """
        self._config_data = config_data
        self._validator_config: Optional[ValidatorConfig] = None

    @classmethod
    def from_environment(cls, env_file: Optional[Path] = None) -> 'ConfigManager':
        """Load configuration from environment variables.

        Environment Variables:
            - CV_MAX_AMOUNT: Default AMOUNT warning threshold
            - CV_ALLOW_NEGATIVE: Default allow_negative rule (true/false)
            - CV_NPI_ISSUER_PREFIX: Include the 80840 prefix in NPI checks
            - CV_MAX_PLAUSIBLE_AGE: Implausible-age warning threshold
            - CV_RECORD_MODE: full or simplified
            - CV_REPORT_MAX_ROWS: Row limit for HTML reports

        Parameters:
            env_file: Optional .env file; defaults to the project root .env

        Returns:
            ConfigManager instance
        """
        env_path = env_file or Path(__file__).parent.parent.parent / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            logger.debug(f"Loaded environment variables from {env_path}")

        validator_data: Dict[str, Any] = {}
        for key in ValidatorConfig.model_fields:
            raw = os.getenv(f"{ENV_PREFIX}{key.upper()}")
            if raw is not None and raw.strip() != "":
                validator_data[key] = raw.strip()

        return cls({"validator": validator_data})

    @classmethod
    def from_file(cls, config_path: str) -> 'ConfigManager':
        """Load configuration from a JSON file.

        Parameters:
            config_path: Path to configuration file

        Returns:
            ConfigManager instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file: {str(e)}")

        if not isinstance(config_data, dict):
            raise ValueError("Configuration file must contain a JSON object")

        return cls(config_data)

    def get_validator_config(self) -> ValidatorConfig:
        """Get validator configuration.

        Returns:
            ValidatorConfig instance
        """
        if self._validator_config is None:
            self._validator_config = ValidatorConfig(**self._config_data.get("validator", {}))
        return self._validator_config

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key.

        Parameters:
            key: Configuration key (supports dot notation, e.g., "validator.max_amount")
            default: Default value if key not found

        Returns:
            Configuration value
        """
        value: Any = self._config_data
        for k in key.split("."):
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default

        return value if value is not None else default


# ============================================================================
# Convenience Functions
# ============================================================================

def get_validator_config() -> ValidatorConfig:
    """Convenience function to get validator configuration from environment.

    Returns:
        ValidatorConfig instance with defaults for anything not set
    """
    return ConfigManager.from_environment().get_validator_config()
