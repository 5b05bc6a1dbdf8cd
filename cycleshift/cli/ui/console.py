"""
Console utilities for cycleshift CLI.

Provides styled console output, banner display, and formatting utilities.
"""

from __future__ import annotations

from rich.console import Console
from rich.text import Text
from rich.theme import Theme

from cycleshift import __version__


# Custom theme for cycleshift
CYCLESHIFT_THEME = Theme({
    "info": "dim cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
    "pending": "dim",
    "running": "bold yellow",
    "completed": "bold green",
    "failed": "bold red",
    "cancelled": "magenta",
    "not_started": "dim",
    "job": "bold magenta",
    "step": "bold blue",
})

# Global console instance
console = Console(theme=CYCLESHIFT_THEME)

TAGLINE = "Funifier cycle change orchestrator"

STATUS_ICONS = {
    "pending": "○",
    "running": "◐",
    "completed": "✔",
    "failed": "✘",
    "cancelled": "■",
    "not_started": "○",
}


def show_banner() -> None:
    """Display the cycleshift banner line."""
    banner = Text()
    banner.append("cycleshift ", style="bold blue")
    banner.append("v", style="dim")
    banner.append(__version__, style="bold cyan")
    banner.append(" | ", style="dim")
    banner.append(TAGLINE, style="italic")

    console.print(banner)
    console.print()


def format_status(status: str) -> str:
    """Format a step or run status with its color and icon."""
    icon = STATUS_ICONS.get(status, "?")
    return f"[{status}]{icon} {status.replace('_', ' ').upper()}[/{status}]"


def print_error(message: str, prefix: str = "Error") -> None:
    """Print an error message."""
    console.print(f"[error]{prefix}:[/] {message}")


def print_warning(message: str, prefix: str = "Warning") -> None:
    """Print a warning message."""
    console.print(f"[warning]{prefix}:[/] {message}")


def print_success(message: str, prefix: str = "Success") -> None:
    """Print a success message."""
    console.print(f"[success]{prefix}:[/] {message}")


def print_info(message: str, prefix: str = "Info") -> None:
    """Print an info message."""
    console.print(f"[info]{prefix}:[/] {message}")
