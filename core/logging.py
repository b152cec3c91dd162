"""
Logging configuration

Pipeline failures are logged with ``extra={"error_context": exc.to_dict()}``.
``ErrorContextFormatter`` renders that context after the message so a single
log line names the failing dataset, URL or file.
"""

import logging
import sys
from typing import Optional
from core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Loggers whose INFO chatter would drown pipeline progress
QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "httpx", "apscheduler")


class ErrorContextFormatter(logging.Formatter):
    """Append the ``error_context`` of a record, when present, to the message"""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        error_context = getattr(record, "error_context", None)
        if not error_context:
            return message

        details = [f"error_type={error_context.get('error_type')}"]
        details.extend(f"{key}={value}" for key, value in error_context.get("context", {}).items())
        if error_context.get("original_error"):
            details.append(f"caused_by={error_context['original_error']}")
        return f"{message} | {' '.join(details)}"


def setup_logging(level: Optional[str] = None):
    """Configure application logging on stdout"""
    level = (level or settings.LOG_LEVEL).upper()
    log_level = getattr(logging, level, logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ErrorContextFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logging.basicConfig(level=log_level, handlers=[handler])

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(f"Logging configured at {level} level")
