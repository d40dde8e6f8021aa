"""Logging setup for the validator, its CLI and its HTTP API.

Two output styles are supported: single-line JSON documents for log
shippers, and a plain text format for terminals.

Security Impact:
    - Callers log data types and verdicts, never raw identifier values
    - Request context travels in ``extra_fields``/``endpoint`` attributes so
      it stays out of the message text
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

SERVICE_NAME = "clinical-validator"
TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
TEXT_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Server and framework loggers that are too chatty below WARNING.
QUIET_LOGGERS = ("uvicorn", "uvicorn.access", "fastapi")


class StructuredFormatter(logging.Formatter):
    """Render each log record as one JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        endpoint = getattr(record, "endpoint", None)
        if endpoint:
            entry["endpoint"] = endpoint
        entry.update(getattr(record, "extra_fields", None) or {})

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def _formatter(use_json: bool) -> logging.Formatter:
    if use_json:
        return StructuredFormatter()
    return logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATE_FORMAT)


def setup_logging(use_json: bool = False, log_level: str = "INFO") -> None:
    """Route all logging to stderr with the chosen format.

    Any handlers already on the root logger are replaced, so calling this
    twice does not duplicate output.

    Parameters:
        use_json: Emit JSON documents instead of text lines
        log_level: Level name; unknown names fall back to INFO
    """
    level = logging.getLevelName(str(log_level).upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(_formatter(use_json))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
