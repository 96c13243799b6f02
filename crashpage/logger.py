import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Dict, List, Optional

# ANSI color codes
COLOR_CODES = {
    "DEBUG": "\033[36m",     # Cyan
    "INFO": "\033[32m",      # Green
    "WARNING": "\033[33m",   # Yellow
    "ERROR": "\033[31m",     # Red
    "CRITICAL": "\033[41m",  # Red background
    "RESET": "\033[0m",
}

# Extras set by ExceptionMiddleware when it logs a caught failure
CONTEXT_FIELDS = ("request_path", "failure_type")


def _record_context(record: logging.LogRecord, show_environment: bool) -> Dict[str, str]:
    context = {
        field: str(getattr(record, field))
        for field in CONTEXT_FIELDS
        if hasattr(record, field)
    }
    if show_environment and hasattr(record, "environment"):
        context["environment"] = record.environment
    return context


# ------------------ FORMATTERS ------------------

class JSONFormatter(logging.Formatter):
    """One JSON object per record."""
    def __init__(self, default_context: Optional[Dict[str, str]] = None, show_environment: bool = True):
        super().__init__()
        self.default_context = default_context or {}
        self.show_environment = show_environment

    def format(self, record):
        log_record = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "logger": record.name,
            "level": record.levelname,
            "message": record.getMessage(),
        }

        context = {**self.default_context, **_record_context(record, self.show_environment)}
        if context:
            log_record["context"] = context

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter."""
    def __init__(self, default_context: Optional[Dict[str, str]] = None, show_environment: bool = False, colored: bool = True):
        super().__init__(
            fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.default_context = default_context or {}
        self.show_environment = show_environment
        self.colored = colored

    def formatMessage(self, record):
        if self.colored and record.levelname in COLOR_CODES:
            color = COLOR_CODES[record.levelname]
            # Colour a copy so other handlers see the plain level name
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"\u001b[1m{color}{record.levelname}{COLOR_CODES['RESET']}"
        return super().formatMessage(record)

    def format(self, record):
        base = super().format(record)
        context: List[str] = [
            f"{key}={value}"
            for key, value in _record_context(record, self.show_environment).items()
        ]
        context.extend(f"{key}={value}" for key, value in self.default_context.items())
        if context:
            base += " " + " ".join(context)
        return base


# ------------------ LOGGER CLASS ------------------

class EnvironmentLoggerAdapter(logging.LoggerAdapter):
    """
    A LoggerAdapter that automatically injects 'environment' into every log record.
    """
    def __init__(self, logger, environment: str):
        super().__init__(logger, {"environment": environment})

    def process(self, msg, kwargs):
        extra = dict(kwargs.get("extra") or {})
        extra["environment"] = self.extra["environment"]
        kwargs["extra"] = extra
        return msg, kwargs


class Logger:
    """
    Logger factory: JSON or text output, console and/or rotating file handlers.

    Example:
        logger = Logger("myapp.errors", json_logs=False)
        app = Application(endpoint, logger=logger)
    """

    def __new__(
        cls,
        name: str,
        log_file: Optional[str] = None,
        level: int = logging.INFO,
        max_bytes: int = 5_000_000,
        backup_count: int = 3,
        json_logs: bool = True,
        to_console: bool = True,
        environment: str = "production",
        default_context: Optional[Dict[str, str]] = None,
        show_environment: bool = False,
        colored_console: bool = True,
    ) -> EnvironmentLoggerAdapter:
        """
        Returns a configured logger instance directly.
        """
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.propagate = False

        # Avoid duplicate handlers if logger is re-created
        if logger.handlers:
            logger.handlers.clear()

        if json_logs:
            formatter: logging.Formatter = JSONFormatter(default_context, show_environment)
        else:
            formatter = TextFormatter(default_context, show_environment, colored_console)

        if log_file:
            os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file, maxBytes=max_bytes, backupCount=backup_count
            )
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        if to_console:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

        return EnvironmentLoggerAdapter(logger, environment)
