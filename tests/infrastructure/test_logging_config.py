"""Tests for logging configuration."""

import json
import logging
import sys

import pytest

from clinical_validator.infrastructure.logging_config import StructuredFormatter, setup_logging


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way the test found it."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(msg="validated %s", args=("NPI",), exc_info=None):
    return logging.LogRecord(
        name="clinical_validator.domain.validator",
        level=logging.WARNING,
        pathname=__file__,
        lineno=42,
        msg=msg,
        args=args,
        exc_info=exc_info,
    )


class TestStructuredFormatter:
    """Test suite for JSON log formatting."""

    def test_fields(self):
        """Test the JSON document written for a record."""
        payload = json.loads(StructuredFormatter().format(_record()))
        assert payload["level"] == "WARNING"
        assert payload["logger"] == "clinical_validator.domain.validator"
        assert payload["message"] == "validated NPI"
        assert payload["line"] == 42
        assert payload["timestamp"].endswith("Z")
        assert "exception" not in payload

    def test_exception_is_included(self):
        """Test that tracebacks are captured."""
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record(exc_info=sys.exc_info())
        payload = json.loads(StructuredFormatter().format(record))
        assert "RuntimeError: boom" in payload["exception"]

    def test_extra_fields(self):
        """Test that extra_fields and endpoint are merged in."""
        record = _record()
        record.extra_fields = {"data_type": "SSN"}
        record.endpoint = "/api/validate"
        payload = json.loads(StructuredFormatter().format(record))
        assert payload["data_type"] == "SSN"
        assert payload["endpoint"] == "/api/validate"


class TestSetupLogging:
    """Test suite for setup_logging."""

    def test_json_handler(self, restore_root_logger):
        """Test that JSON mode installs the structured formatter."""
        setup_logging(use_json=True, log_level="DEBUG")
        assert restore_root_logger.level == logging.DEBUG
        assert len(restore_root_logger.handlers) == 1
        assert isinstance(restore_root_logger.handlers[0].formatter, StructuredFormatter)

    def test_text_handler(self, restore_root_logger):
        """Test the human-readable default."""
        setup_logging()
        assert restore_root_logger.level == logging.INFO
        assert not isinstance(restore_root_logger.handlers[0].formatter, StructuredFormatter)

    def test_unknown_level_defaults_to_info(self, restore_root_logger):
        """Test that a bad level name does not fail."""
        setup_logging(log_level="chatty")
        assert restore_root_logger.level == logging.INFO

    def test_third_party_loggers_quieted(self, restore_root_logger):
        """Test that server loggers are raised to WARNING."""
        setup_logging(log_level="DEBUG")
        assert logging.getLogger("uvicorn.access").level == logging.WARNING
