# -*- coding: utf-8 -*-
"""
Logging configuration for applications and the command line.

The library itself never configures logging; call setup_logging() from an
application entry point to get plain or structured JSON output.
"""
import logging
import sys
from typing import TextIO

from pythonjsonlogger.json import JsonFormatter as jsonlogger

from .config import settings
from .context import get_request_id

PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s"


class RequestIDFilter(logging.Filter):
    """Add request_id to log records."""

    def filter(self, record):
        record.request_id = get_request_id() or "-"
        return True


class CustomJsonFormatter(jsonlogger):
    """Custom JSON formatter with standard fields."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["request_id"] = getattr(record, "request_id", "-")


def setup_logging(
        level: str | None = None,
        json_format: bool | None = None,
        stream: TextIO | None = None,
) -> logging.Logger:
    """
    Configure root logging.

    Args:
        level: Log level name. Defaults to settings.LOG_LEVEL.
        json_format: Emit JSON lines. Defaults to settings.LOG_JSON.
        stream: Output stream. Defaults to stdout.
    """
    level = (level or settings.LOG_LEVEL).upper()
    json_format = settings.LOG_JSON if json_format is None else json_format

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level))

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    if json_format:
        formatter = CustomJsonFormatter(
            fmt="%(timestamp)s %(level)s %(name)s %(request_id)s %(message)s",
            rename_fields={"timestamp": "@timestamp", "levelname": "level"},
            timestamp=True,
        )
    else:
        formatter = logging.Formatter(PLAIN_FORMAT)
    handler.setFormatter(formatter)
    handler.addFilter(RequestIDFilter())
    root_logger.addHandler(handler)

    # Reduce noise from external libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return root_logger
