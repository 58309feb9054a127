"""
Structured logging utilities for comprehensive application logging
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .config import Settings

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class StructuredLogger:
    """
    Structured logger that outputs JSON logs for easy parsing and querying
    """

    def __init__(self, name: str, level: Optional[int] = None):
        self.logger = logging.getLogger(name)
        # unset keeps the level configure_logging gave the package logger
        if level is not None:
            self.logger.setLevel(level)

    def log(self, level: str, message: str, **kwargs):
        """Log with structured data"""
        log_data = {"message": message, **kwargs}
        self.logger.log(getattr(logging, level.upper()), json.dumps(log_data, default=str))

    def info(self, message: str, **kwargs):
        """Log info level"""
        self.log("info", message, **kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning level"""
        self.log("warning", message, **kwargs)

    def error(self, message: str, **kwargs):
        """Log error level"""
        self.log("error", message, **kwargs)

    def debug(self, message: str, **kwargs):
        """Log debug level"""
        self.log("debug", message, **kwargs)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Add exception info if present
        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        # Add extra fields if present
        if hasattr(record, "extra_data"):
            log_obj.update(record.extra_data)

        return json.dumps(log_obj, default=str)


def configure_logging(settings: "Settings") -> None:
    """Install a single stdout handler on the application logger."""
    logger = logging.getLogger("clinicrx")
    logger.setLevel(settings.logging.level)

    for handler in list(logger.handlers):
        if getattr(handler, "_clinicrx_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    if settings.logging.format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    handler._clinicrx_handler = True
    logger.addHandler(handler)


def get_logger(name: str) -> StructuredLogger:
    """Get or create a structured logger"""
    return StructuredLogger(name)
