"""
Logging infrastructure for the DocumentDB client.

Provides structured logging with JSON formatting and redaction of keys,
signatures and resource tokens.
"""

import logging
import logging.handlers
import json
import sys
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional
from contextvars import ContextVar

# Context variable for the activity id of the current operation
activity_id: ContextVar[Optional[str]] = ContextVar('activity_id', default=None)


class SensitiveDataFilter(logging.Filter):
    """Filter to redact sensitive data from log messages."""

    PATTERNS = [
        (re.compile(r'(authorization["\']?\s*[:=]\s*["\']?)[^\s"\',}]+', re.IGNORECASE), r'\1***REDACTED***'),
        (re.compile(r'(sig(?:=|%3D))[^&\s"\',}]+', re.IGNORECASE), r'\1***REDACTED***'),
        (re.compile(r'(master_?key["\']?\s*[:=]\s*["\']?)[^\s"\',}]+', re.IGNORECASE), r'\1***REDACTED***'),
        (re.compile(r'(AccountKey=)[^;]+', re.IGNORECASE), r'\1***REDACTED***'),
        (re.compile(r'(_token["\']?\s*[:=]\s*["\']?)[^\s"\',}]+', re.IGNORECASE), r'\1***REDACTED***'),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        """Redact sensitive data from log record."""
        if isinstance(record.msg, str):
            for pattern, replacement in self.PATTERNS:
                record.msg = pattern.sub(replacement, record.msg)
        return True


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "message": record.getMessage(),
        }

        if act_id := activity_id.get():
            log_data["activity_id"] = act_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "context"):
            log_data["context"] = record.context

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter."""

    def __init__(self):
        fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        super().__init__(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S")


def setup_logging(
    level: str = "INFO",
    format_type: str = "text",
    log_file: Optional[str] = None,
    module_levels: Optional[Dict[str, str]] = None,
    stream=None
) -> None:
    """
    Configure logging for applications embedding the client.

    Only the ``documentdb`` logger hierarchy is touched; the root logger is
    left to the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: Log format ("json" or "text")
        log_file: Optional file path for log output
        module_levels: Optional dict of module-specific log levels
                      e.g., {"documentdb.executor": "DEBUG"}
        stream: Console stream (stderr if None)
    """
    package_logger = logging.getLogger("documentdb")
    package_logger.setLevel(getattr(logging, level.upper()))
    package_logger.handlers.clear()
    package_logger.propagate = False

    formatter: logging.Formatter = JSONFormatter() if format_type == "json" else TextFormatter()

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(SensitiveDataFilter())
    package_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file,
            maxBytes=10 * 1024 ** 2,
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        file_handler.addFilter(SensitiveDataFilter())
        package_logger.addHandler(file_handler)

    if module_levels:
        for module_name, module_level in module_levels.items():
            logging.getLogger(module_name).setLevel(getattr(logging, module_level.upper()))

    package_logger.debug(f"Logging configured: level={level}, format={format_type}")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def set_activity_id(act_id: str) -> None:
    """Set activity id for current context."""
    activity_id.set(act_id)


def clear_activity_id() -> None:
    """Clear activity id from current context."""
    activity_id.set(None)


def log_with_context(logger: logging.Logger, level: int, message: str, **context: Any) -> None:
    """
    Log a message with additional context.

    Args:
        logger: Logger instance
        level: Log level
        message: Log message
        **context: Additional context to include in log
    """
    extra = {"context": context} if context else {}
    logger.log(level, message, extra=extra)
