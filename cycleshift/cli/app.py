"""
Main CLI application.

This module defines the main Typer application and entry point.
"""

from __future__ import annotations

import os

import typer
from rich.console import Console

from cycleshift import __version__
from cycleshift.cli.commands import config, cycle

# Create the main app
app = typer.Typer(
    name="cycleshift",
    help="Funifier cycle change orchestrator",
    add_completion=True,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

# Add sub-commands
app.add_typer(cycle.app, name="cycle", help="Run the cycle change")
app.add_typer(config.app, name="config", help="Configuration management")

console = Console()


def version_callback(value: bool):
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]cycleshift[/] v{__version__}")
        raise typer.Exit()


# Global state for CLI options
class CLIState:
    """Global CLI state for options like quiet, debug, color."""

    quiet: bool = False
    debug: bool = False
    no_color: bool = False


cli_state = CLIState()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-essential output",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug output",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
):
    """
    cycleshift - Funifier cycle change orchestrator

    Runs the reset schedulers of a Funifier gamification program in order
    and confirms that every player was cleared after each one.

    Global Options:
        --quiet, -q    Suppress non-essential output
        --debug        Enable debug logging
        --no-color     Disable colored output
    """
    from cycleshift.cli.ui.console import console as ui_console
    from cycleshift.utils.logger import setup_logging

    cli_state.quiet = quiet
    cli_state.debug = debug
    cli_state.no_color = no_color

    # Set environment variable for no-color (used by Rich)
    if no_color:
        os.environ["NO_COLOR"] = "1"
        ui_console.no_color = True

    if quiet:
        ui_console.quiet = True

    if debug:
        setup_logging(level="DEBUG")


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
