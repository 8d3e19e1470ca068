"""
Gator Logging Configuration
===========================

Everything logs under the ``gator`` logger tree. The console handler writes
to stderr so command output on stdout stays clean; the optional log file is
rotated and always holds JSON lines.
"""

import json
import logging
import logging.handlers
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

ROOT_LOGGER = "gator"

# Chatty libraries are capped at WARNING
_QUIET_LOGGERS = ("aiohttp", "feedparser", "asyncio")

# A bare record's attributes; anything else arrived through ``extra``
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, with ``extra`` fields nested."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        extra = {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS}
        if extra:
            entry["extra"] = extra
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


class ColoredConsoleFormatter(logging.Formatter):
    """Short colored lines for an interactive terminal."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        clock = time.strftime("%H:%M:%S", time.localtime(record.created))
        line = f"{color}{clock} {record.levelname:<8}{self.RESET} {record.name}: {record.getMessage()}"

        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class LoggerAdapter(logging.LoggerAdapter):
    """Adapter whose context is merged with, not replaced by, call-site ``extra``."""

    def process(self, msg: Any, kwargs: Dict[str, Any]) -> tuple:
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def get_logger_for_component(
    component_name: str,
    feed_url: Optional[str] = None,
    feed_name: Optional[str] = None,
) -> LoggerAdapter:
    """Get a ``gator.<component>`` logger that stamps its context on every record.

    Args:
        component_name: Component name, e.g. 'scheduler' or 'feed_fetcher'
        feed_url: Feed this logger is dedicated to (optional)
        feed_name: Human name of that feed (optional)
    """
    context = {"component": component_name}
    if feed_url:
        context["feed_url"] = feed_url
    if feed_name:
        context["feed_name"] = feed_name

    return LoggerAdapter(logging.getLogger(f"{ROOT_LOGGER}.{component_name}"), context)


def configure_application_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = "logs/gator.log",
    enable_console: bool = True,
    structured_logging: bool = False,
    max_file_size_mb: int = 10,
    backup_count: int = 5,
) -> logging.Logger:
    """Install handlers on the ``gator`` logger, replacing any from a previous call.

    Args:
        log_level: Level name for the gator tree
        log_file: Rotating JSON log file, or None for no file
        enable_console: Log to stderr
        structured_logging: JSON lines on the console instead of colored text
        max_file_size_mb: Rotate the file past this size
        backup_count: Rotated files to keep

    Returns:
        The configured ``gator`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level.upper())
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if enable_console:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(StructuredFormatter() if structured_logging else ColoredConsoleFormatter())
        logger.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


class PerformanceLogger:
    """Times a block and logs how it ended.

    ``duration`` (seconds) is available after the block, whether it
    succeeded or raised. Exceptions are never suppressed.
    """

    def __init__(self, logger, operation: str, **context):
        self.logger = logger
        self.operation = operation
        self.context = context
        self.duration = 0.0
        self._started: Optional[float] = None

    def __enter__(self) -> "PerformanceLogger":
        self._started = time.perf_counter()
        self.logger.debug(f"Starting {self.operation}", extra=self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.duration = time.perf_counter() - self._started
        extra = {**self.context, "duration_seconds": self.duration, "success": exc_type is None}

        if exc_type is None:
            self.logger.info(f"Completed {self.operation} in {self.duration:.3f}s", extra=extra)
        else:
            self.logger.error(f"Failed {self.operation} in {self.duration:.3f}s", extra=extra)
        return False
