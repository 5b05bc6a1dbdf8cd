"""
Structured logging for cycleshift.

Provides a consistent logging interface with support for:
- Multiple log levels
- Structured JSON logging
- Console and file output
- Rich formatting for console
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from cycleshift.models.cycle import StepStatus

if TYPE_CHECKING:
    from cycleshift.models.cycle import CycleStep


class LogLevel(str, Enum):
    """Log levels for cycleshift."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def numeric(self) -> int:
        """Get numeric log level."""
        levels = {
            "debug": logging.DEBUG,
            "info": logging.INFO,
            "warning": logging.WARNING,
            "error": logging.ERROR,
            "critical": logging.CRITICAL,
        }
        return levels.get(self.value, logging.INFO)


# Global logger cache
_loggers: dict[str, logging.Logger] = {}


def get_logger(name: str = "cycleshift") -> logging.Logger:
    """
    Get a logger instance.

    Loggers under the ``cycleshift`` namespace propagate to the root
    cycleshift logger, which owns the handlers (see setup_logging).

    Args:
        name: Logger name (usually module name)

    Returns:
        Logger instance
    """
    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(name)

    root = logging.getLogger("cycleshift")
    if not root.handlers:
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
            markup=True,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
        root.setLevel(logging.INFO)

    _loggers[name] = logger
    return logger


def setup_logging(
    level: LogLevel | str = LogLevel.INFO,
    log_file: str | Path | None = None,
    json_format: bool = False,
    console: bool = True,
) -> None:
    """
    Set up logging configuration for cycleshift.

    Args:
        level: Minimum log level
        log_file: Optional file path for log output
        json_format: Use JSON format for file logs
        console: Enable console output
    """
    if isinstance(level, str):
        level = LogLevel(level.lower())

    root = logging.getLogger("cycleshift")
    root.setLevel(level.numeric)
    root.handlers.clear()

    if console:
        console_handler = RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
            markup=True,
            rich_tracebacks=True,
        )
        console_handler.setLevel(level.numeric)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        if json_format:
            file_handler.setFormatter(JsonFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(
                "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
            ))

        file_handler.setLevel(level.numeric)
        root.addHandler(file_handler)

    if not root.handlers:
        root.addHandler(logging.NullHandler())


class JsonFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Fields passed through `extra=`
        for key in ("step_id", "job_id", "validation_key", "run_status"):
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def log_step_result(logger: logging.Logger, step: CycleStep) -> None:
    """
    Log the outcome of a finished step with structured data.

    Args:
        logger: Logger to use
        step: Step that just completed or failed
    """
    extra = {
        "step_id": step.id,
        "job_id": step.job_id,
        "validation_key": step.validation_key,
    }
    duration = step.duration or 0.0

    if step.status == StepStatus.COMPLETED:
        logger.info(
            f"[magenta]{step.id}[/] [cyan]{escape(step.name)}[/] completed in {duration:.1f}s",
            extra=extra,
        )
    else:
        logger.error(
            f"[magenta]{step.id}[/] [cyan]{escape(step.name)}[/] failed: {escape(step.message or 'Unknown error')}",
            extra=extra,
        )
