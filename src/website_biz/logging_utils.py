"""Logging setup for the website-biz CLI, worker and HTTP server."""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# LogRecord attributes that never count as ``extra`` fields
_STANDARD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "message", "taskName",
}

NOISY_LOGGERS = [
    "urllib3",
    "requests",
    "httpx",
    "httpcore",
    "openai",
    "sqlalchemy.engine",
    "uvicorn.access",
]


class StructuredFormatter(logging.Formatter):
    """Formatter that emits one JSON object per log line."""

    def __init__(self, service_name: str = "website-biz", include_extra: bool = True):
        """Initialize the structured formatter.

        Args:
            service_name: Name of the service to include in logs
            include_extra: Whether to include extra fields from the log record
        """
        super().__init__()
        self.service_name = service_name
        self.include_extra = include_extra

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as a JSON string.

        Args:
            record: The log record to format

        Returns:
            JSON-formatted log string
        """
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "service": self.service_name,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if self.include_extra:
            extra_fields = {}
            for key, value in record.__dict__.items():
                if key in _STANDARD_ATTRS or key.startswith("_"):
                    continue
                try:
                    json.dumps(value)
                    extra_fields[key] = value
                except (TypeError, ValueError):
                    extra_fields[key] = str(value)
            if extra_fields:
                log_data["extra"] = extra_fields

        return json.dumps(log_data, default=str)


class HumanReadableFormatter(logging.Formatter):
    """Human-readable formatter for development environments."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True, stream=None):
        super().__init__()
        stream = stream or sys.stderr
        self.use_colors = use_colors and hasattr(stream, "isatty") and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname

        if self.use_colors:
            level_str = f"{self.COLORS.get(level, '')}{level:8}{self.RESET}"
        else:
            level_str = f"{level:8}"

        formatted = f"[{timestamp}] {level_str} [{record.name}] {record.getMessage()}"
        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"
        return formatted


def setup_logging(
    level: Optional[str] = None,
    structured: Optional[bool] = None,
    service_name: str = "website-biz",
) -> logging.Logger:
    """Configure the root logger for a website-biz process.

    Log output goes to stderr so that the CLI's JSON results on stdout stay
    machine-readable.

    Args:
        level: Log level name. Defaults to the LOG_LEVEL env var or INFO.
        structured: Emit JSON lines. Defaults to True unless APP_ENV is 'dev'.
        service_name: Service name to include in structured logs.

    Returns:
        The ``website_biz`` package logger.

    Example:
        >>> logger = setup_logging(level="DEBUG", structured=False)
        >>> logger.info("Claimed job", extra={"job_id": "abc"})
    """
    if level is None:
        level = os.environ.get("LOG_LEVEL", "INFO")
    level = level.upper()
    log_level = getattr(logging, level, logging.INFO)

    if structured is None:
        structured = os.environ.get("APP_ENV", "dev") not in ("dev", "development")

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    if structured:
        console_handler.setFormatter(StructuredFormatter(service_name=service_name))
    else:
        console_handler.setFormatter(HumanReadableFormatter(stream=sys.stderr))
    root_logger.addHandler(console_handler)

    _configure_third_party_loggers(log_level)

    logger = logging.getLogger("website_biz")
    logger.debug(
        "Logging initialized",
        extra={"log_level": level, "structured": structured},
    )
    return logger


def _configure_third_party_loggers(log_level: int) -> None:
    """Quiet noisy third-party loggers unless running at DEBUG."""
    third_party_level = logging.WARNING if log_level > logging.DEBUG else log_level
    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(third_party_level)
