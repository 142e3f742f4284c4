import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Dict, Optional

# ANSI color codes
COLOR_CODES = {
    "DEBUG": "\033[36m",     # Cyan
    "INFO": "\033[32m",      # Green
    "WARNING": "\033[33m",   # Yellow
    "ERROR": "\033[31m",     # Red
    "CRITICAL": "\033[41m",  # Red background
    "RESET": "\033[0m",      # Reset
}

# Exchange attributes that handlers attach to records through `extra=`
EXCHANGE_FIELDS = ("remote_addr", "method", "path", "status", "size", "duration_ms")

# ------------------ FORMATTERS ------------------


def _exchange_context(record: logging.LogRecord) -> Dict[str, object]:
    return {
        field: getattr(record, field)
        for field in EXCHANGE_FIELDS
        if hasattr(record, field)
    }


class JSONFormatter(logging.Formatter):
    """Formatter for structured (JSON) logs, one object per line."""

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

        context = {**self.default_context, **_exchange_context(record)}
        if self.show_environment and hasattr(record, "environment"):
            context["environment"] = record.environment

        if context:
            log_record["context"] = context

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=str)


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

    def format(self, record):
        levelname = record.levelname
        if self.colored and levelname in COLOR_CODES:
            record.levelname = f"\u001b[1m{COLOR_CODES[levelname]}{levelname}{COLOR_CODES['RESET']}\u001b[0m"
        try:
            base = super().format(record)
        finally:
            record.levelname = levelname

        context = [f"{key}={value}" for key, value in _exchange_context(record).items()]
        if self.show_environment and hasattr(record, "environment"):
            context.append(f"env={record.environment}")
        for key, value in self.default_context.items():
            context.append(f"{key}={value}")

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
        # Merge any existing extras with environment info
        extra = dict(kwargs.get("extra") or {})
        extra["environment"] = self.extra["environment"]
        kwargs["extra"] = extra
        return msg, kwargs


class Logger:
    """
    Configurable logger factory that supports JSON or text output,
    file or console handlers, and contextual metadata.

    Usage:
        log = Logger("interpose.access", json_logs=False)
        log.info("served", extra={"method": "GET", "path": "/"})
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
        Returns a configured logger adapter directly.
        """
        base_logger = cls._create_logger(
            name=name,
            log_file=log_file,
            level=level,
            max_bytes=max_bytes,
            backup_count=backup_count,
            json_logs=json_logs,
            to_console=to_console,
            default_context=default_context,
            show_environment=show_environment,
            colored_console=colored_console,
        )

        # Wrap with adapter to inject environment automatically
        return EnvironmentLoggerAdapter(base_logger, environment)

    @staticmethod
    def _create_logger(
        name: str,
        log_file: Optional[str],
        level: int,
        max_bytes: int,
        backup_count: int,
        json_logs: bool,
        to_console: bool,
        default_context: Optional[Dict[str, str]],
        show_environment: bool,
        colored_console: bool,
    ) -> logging.Logger:
        """Configure and return the base logger."""
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.propagate = False

        # Avoid duplicate handlers if logger is re-created
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        if json_logs:
            formatter: logging.Formatter = JSONFormatter(default_context, show_environment)
        else:
            formatter = TextFormatter(default_context, show_environment, colored_console)

        # File handler
        if log_file:
            os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file, maxBytes=max_bytes, backupCount=backup_count
            )
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        # Console handler
        if to_console:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

        return logger


def configure_logging(settings) -> EnvironmentLoggerAdapter:
    """Configure the 'interpose' logger tree from a Settings object."""
    return Logger(
        "interpose",
        log_file=settings.log_file,
        level=logging.getLevelName(settings.log_level.upper()),
        json_logs=settings.json_logs,
        environment=settings.environment,
        show_environment=settings.json_logs,
    )
