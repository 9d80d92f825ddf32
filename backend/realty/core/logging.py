"""Logging for the listings service.

Every line carries the request id when it was logged while serving a request.
The access line written by ``RequestIDMiddleware`` also carries the method,
path, status code and duration, which the JSON format emits as fields.
"""

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any

# Attributes passed through ``extra=`` that the JSON format keeps.
REQUEST_FIELDS = ("request_id", "method", "path", "status_code", "duration_ms")

STANDARD_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(request_tag)s%(message)s"


class RequestContextFilter(logging.Filter):
    """Adds ``request_tag`` so plain-text lines show the request id when present."""

    def filter(self, record: logging.LogRecord) -> bool:
        request_id = getattr(record, "request_id", None)
        record.request_tag = f"[{request_id}] " if request_id else ""
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in REQUEST_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def setup_logging(level: str = "INFO", format_type: str = "standard") -> None:
    """Route the service's logs to stdout, as text or one JSON object per line."""
    log_level = level.upper() if isinstance(logging.getLevelName(level.upper()), int) else "INFO"
    formatter = "json" if format_type == "json" else "standard"

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"request_context": {"()": RequestContextFilter}},
            "formatters": {
                "standard": {"format": STANDARD_FORMAT},
                "json": {"()": JsonFormatter},
            },
            "handlers": {
                "stdout": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": formatter,
                    "filters": ["request_context"],
                },
            },
            "root": {"level": log_level, "handlers": ["stdout"]},
            "loggers": {
                "realty": {"level": log_level},
                # RequestIDMiddleware already writes one access line per request.
                "uvicorn.access": {"level": "WARNING"},
                "sqlalchemy.engine": {"level": "WARNING"},
                "urllib3": {"level": "WARNING"},
            },
        }
    )
