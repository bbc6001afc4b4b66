"""Structured logging configuration."""

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

from . import config


class StorefrontJsonFormatter(JsonFormatter):
    """JSON formatter that tags every record with the service name."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["service"] = "storefront"
        if "message" in log_record:
            log_record["msg"] = log_record.pop("message")


def setup_logging(level: str | None = None, stream=None) -> None:
    """Configure JSON logging on the root logger."""
    root_logger = logging.getLogger()
    root_logger.setLevel((level or config.LOG_LEVEL).upper())

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = StorefrontJsonFormatter(
        "%(levelname)s %(name)s %(message)s",
        rename_fields={"levelname": "level"},
    )
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Reduce noise from libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
