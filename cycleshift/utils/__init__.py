"""
Utility modules for cycleshift.

This package provides common utilities:
- logger: Structured logging
- helpers: Formatting helpers
"""

from cycleshift.utils.logger import (
    get_logger,
    setup_logging,
    LogLevel,
)
from cycleshift.utils.helpers import (
    truncate_string,
    format_duration,
    format_timestamp,
)

__all__ = [
    # Logger
    "get_logger",
    "setup_logging",
    "LogLevel",
    # Helpers
    "truncate_string",
    "format_duration",
    "format_timestamp",
]
