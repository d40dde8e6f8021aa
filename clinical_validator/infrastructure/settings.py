"""Application Settings and Configuration.

This module provides application-wide settings that combine configuration
from the configuration manager with application-specific defaults.
"""

import os
from typing import Optional

from clinical_validator.infrastructure.config_manager import ValidatorConfig, get_validator_config

# Application metadata
APP_NAME = "Clinical-Validator"
APP_VERSION = "1.0.0"

DEFAULT_API_HOST = "127.0.0.1"
DEFAULT_API_PORT = 8000


class Settings:
    """Application settings loaded from configuration manager and environment."""

    def __init__(self):
        """Initialize settings from environment."""
        self._validator_config: Optional[ValidatorConfig] = None

        self.app_name = os.getenv("CV_APP_NAME", APP_NAME)
        self.app_version = APP_VERSION

        # Logging
        self.log_level = os.getenv("CV_LOG_LEVEL", "INFO")
        self.json_logs = os.getenv("CV_JSON_LOGS", "false").lower() == "true"

        # HTTP API
        self.api_host = os.getenv("CV_API_HOST", DEFAULT_API_HOST)
        self.api_port = int(os.getenv("CV_API_PORT", str(DEFAULT_API_PORT)))

    @property
    def validator_config(self) -> ValidatorConfig:
        """Validator configuration, loaded lazily on first access."""
        if self._validator_config is None:
            self._validator_config = get_validator_config()
        return self._validator_config


# Global settings instance
settings = Settings()
