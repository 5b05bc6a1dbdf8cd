"""
Cycle change commands for cycleshift CLI.
"""

from __future__ import annotations

import asyncio
import signal
import sys
from typing import TYPE_CHECKING, Optional

import typer

from cycleshift.cli.ui.console import console, print_error, print_info, print_warning
from cycleshift.exceptions import CycleShiftError, FunifierAPIError
from cycleshift.models.config import CycleShiftConfig
from cycleshift.models.cycle import RunStatus

if TYPE_CHECKING:
    from cycleshift.core.engine import CycleChangeEngine
    from cycleshift.models.cycle import CycleRun
    from cycleshift.workflows.loader import WorkflowDefinition

app = typer.Typer(help="Run the cycle change")

# Global reference for signal handler
_current_engine: CycleChangeEngine | None = None
_cancel_requested = False


def _signal_handler(signum, frame):
    """Handle SIGINT/SIGTERM by cancelling the running cycle change."""
    global _cancel_requested

    if _cancel_requested:
        # Second signal - force exit
        console.print("\n[red]Forced exit[/]")
        sys.exit(1)

    _cancel_requested = True
    console.print("\n[yellow]Cancelling after the current step (Ctrl+C again to force)[/]")

    if _current_engine:
        _current_engine.cancel()


def _setup_signal_handlers():
    """Set up signal handlers for cancellation."""
    signal.signal(signal.SIGINT, _signal_handler)

    if sys.platform != "win32":
        signal.signal(signal.SIGTERM, _signal_handler)


def load_workflow(config: CycleShiftConfig) -> WorkflowDefinition:
    """
    Load the workflow selected by the configuration.

    Raises:
        WorkflowDefinitionError: If the definition is malformed or invalid
        FileNotFoundError: If the workflow cannot be found
    """
    from cycleshift.exceptions import WorkflowDefinitionError
    from cycleshift.workflows.loader import WorkflowLoader

    loader = WorkflowLoader()
    if config.cycle.workflow_file:
        definition = loader.load_file(config.cycle.workflow_file)
    else:
        definition = loader.load(config.cycle.workflow)

    errors = loader.validate(definition)
    if errors:
        raise WorkflowDefinitionError("; ".join(errors))
    return definition


@app.command("plan")
def cycle_plan(
    config_file: str = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file to use",
    ),
):
    """Show the steps a cycle change would run, without running anything."""
    from cycleshift.cli.ui.panels import create_workflow_table

    config = CycleShiftConfig.load(config_file)
    try:
        definition = load_workflow(config)
    except (CycleShiftError, FileNotFoundError) as e:
        print_error(str(e))
        raise typer.Exit(1)

    console.print(create_workflow_table(definition))
    console.print(
        f"\n[dim]Each step waits {config.cycle.settle_delay:g}s after its scheduler, then "
        f"re-checks every {config.cycle.poll_interval:g}s for up to "
        f"{config.cycle.validation_timeout:g}s.[/]"
    )


@app.command("run")
def cycle_run(
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip the confirmation prompt",
    ),
    config_file: str = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file to use",
    ),
    settle_delay: Optional[float] = typer.Option(
        None,
        "--settle-delay",
        help="Seconds to wait after each scheduler before validating",
        min=0,
    ),
    validation_timeout: Optional[float] = typer.Option(
        None,
        "--validation-timeout",
        help="Seconds to keep re-checking a failing validation",
        min=0,
    ),
):
    """
    Run the cycle change.

    Executes every reset scheduler in order and verifies that all players
    were cleared before moving on. The operation cannot be undone.

    Example:
        cycleshift cycle run
        cycleshift cycle run --yes --settle-delay 10
    """
    from cycleshift.cli.app import cli_state
    from cycleshift.cli.ui.console import show_banner
    from cycleshift.cli.ui.panels import create_summary_panel
    from cycleshift.utils.logger import setup_logging

    config = CycleShiftConfig.load(config_file)
    if settle_delay is not None:
        config.cycle.settle_delay = settle_delay
    if validation_timeout is not None:
        config.cycle.validation_timeout = validation_timeout

    setup_logging(
        level="DEBUG" if cli_state.debug else config.logging.level,
        log_file=config.logging.file,
        json_format=config.logging.json_format,
    )

    show_banner()

    if not config.funifier.is_configured():
        print_error(
            "Funifier credentials are not configured. "
            "Set CYCLESHIFT_FUNIFIER__BASIC_TOKEN or run 'cycleshift config init'."
        )
        raise typer.Exit(1)

    try:
        definition = load_workflow(config)
    except (CycleShiftError, FileNotFoundError) as e:
        print_error(str(e))
        raise typer.Exit(1)

    if not yes:
        print_warning(
            f"This will run {len(definition.steps)} reset schedulers against "
            f"{config.funifier.base_url}. This cannot be undone."
        )
        typer.confirm("Start the cycle change?", abort=True)

    run = asyncio.run(run_cycle_change(config, definition))

    console.print()
    if run is None:
        print_error("Cycle change did not produce a result")
        raise typer.Exit(1)

    console.print(create_summary_panel(run.summary(), run))

    if run.status != RunStatus.COMPLETED:
        raise typer.Exit(1)


@app.command("logs")
def cycle_logs(
    job_id: str = typer.Argument(..., help="Scheduler id"),
    limit: int = typer.Option(
        50,
        "--limit",
        "-n",
        help="Maximum number of log entries",
        min=1,
        max=1000,
    ),
    config_file: str = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file to use",
    ),
):
    """Show the most recent execution logs of a scheduler."""
    from cycleshift.cli.ui.panels import create_logs_table

    config = CycleShiftConfig.load(config_file)
    try:
        entries = asyncio.run(fetch_job_logs(config, job_id, limit))
    except FunifierAPIError as e:
        print_error(str(e))
        raise typer.Exit(1)

    if not entries:
        print_info(f"No logs found for scheduler {job_id}")
        return

    console.print(create_logs_table(job_id, entries))


async def run_cycle_change(
    config: CycleShiftConfig,
    definition: WorkflowDefinition,
) -> CycleRun | None:
    """Run the cycle change with a live progress display."""
    global _current_engine, _cancel_requested

    from cycleshift.cli.ui.progress import CycleProgress
    from cycleshift.core.engine import CycleChangeEngine
    from cycleshift.funifier.client import FunifierClient

    _cancel_requested = False

    async with FunifierClient(config.funifier) as client:
        engine = CycleChangeEngine(client, definition=definition, cycle=config.cycle)
        progress = CycleProgress(console)
        unsubscribe = engine.subscribe(progress)

        engine.initialize()
        _current_engine = engine
        _setup_signal_handlers()

        try:
            with progress.live():
                await engine.start()
        finally:
            _current_engine = None
            unsubscribe()

        return engine.get_current_progress()


async def fetch_job_logs(config: CycleShiftConfig, job_id: str, limit: int) -> list[dict]:
    """Fetch scheduler logs, newest first."""
    from cycleshift.funifier.client import FunifierClient

    async with FunifierClient(config.funifier) as client:
        return await client.get_job_logs(
            job_id,
            max_results=limit,
            orderby="time",
            reverse=True,
        )
