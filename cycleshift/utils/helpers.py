"""
Helper utilities for cycleshift.

Formatting helpers shared by the CLI panels and progress display.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any


def truncate_string(
    text: str,
    max_length: int,
    suffix: str = "...",
) -> str:
    """
    Truncate a string to a maximum length.

    Args:
        text: Input string
        max_length: Maximum length including suffix
        suffix: Suffix to append when truncated

    Returns:
        Truncated string
    """
    if len(text) <= max_length:
        return text

    return text[: max_length - len(suffix)] + suffix


def format_duration(seconds: float | None) -> str:
    """
    Format seconds as human-readable duration.

    Args:
        seconds: Duration in seconds (None when unknown)

    Returns:
        Human-readable string (e.g., "2h 30m 15s")
    """
    if seconds is None:
        return "-"
    if seconds < 0:
        return "0s"

    delta = timedelta(seconds=int(seconds))

    parts = []

    days = delta.days
    hours, remainder = divmod(delta.seconds, 3600)
    minutes, secs = divmod(remainder, 60)

    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if secs or not parts:
        parts.append(f"{secs}s")

    return " ".join(parts)


def format_timestamp(value: Any) -> str:
    """
    Format a timestamp from the Funifier API.

    Accepts epoch milliseconds, datetimes, or already formatted strings.
    """
    if value is None:
        return "-"
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000).strftime("%Y-%m-%d %H:%M:%S")
    return str(value)

