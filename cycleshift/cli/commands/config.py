"""
Configuration commands for cycleshift CLI.
"""

from __future__ import annotations

import os
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

app = typer.Typer(help="Configuration management")
console = Console()


@app.command("show")
def config_show(
    config_file: str = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file to show",
    ),
):
    """Show current configuration."""
    from cycleshift.models.config import CycleShiftConfig

    try:
        config = CycleShiftConfig.load(config_file)
    except Exception as e:
        console.print(f"[red]Error loading config: {e}[/]")
        raise typer.Exit(1)

    console.print(
        Panel.fit(
            f"[bold]Funifier:[/]\n"
            f"  Base URL: {config.funifier.base_url}\n"
            f"  Token: {'Set' if config.funifier.is_configured() else '[red]Not Set[/]'}\n"
            f"  Request Timeout: {config.funifier.request_timeout:g}s\n"
            f"  Execute Timeout: {config.funifier.execute_timeout:g}s\n"
            f"  Max Players: {config.funifier.max_players}\n"
            f"\n[bold]Cycle Change:[/]\n"
            f"  Workflow: {config.cycle.workflow_file or config.cycle.workflow}\n"
            f"  Settle Delay: {config.cycle.settle_delay:g}s\n"
            f"  Poll Interval: {config.cycle.poll_interval:g}s\n"
            f"  Validation Timeout: {config.cycle.validation_timeout:g}s\n"
            f"  Log Limit: {config.cycle.log_limit}\n"
            f"\n[bold]Logging:[/]\n"
            f"  Level: {config.logging.level}\n"
            f"  File: {config.logging.file or '-'}",
            title="[bold blue]cycleshift Configuration[/]",
        )
    )


@app.command("validate")
def config_validate(
    config_file: str = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file to validate",
    ),
):
    """Validate configuration and the selected workflow."""
    from cycleshift.cli.commands.cycle import load_workflow
    from cycleshift.exceptions import CycleShiftError
    from cycleshift.models.config import CycleShiftConfig

    errors = []
    warnings = []

    try:
        config = CycleShiftConfig.load(config_file)
    except Exception as e:
        console.print(f"[red]Error validating config: {e}[/]")
        raise typer.Exit(1)

    console.print("[green]Configuration parsed successfully[/]\n")

    if not config.funifier.is_configured():
        errors.append(
            "Funifier token is not set. "
            "Set CYCLESHIFT_FUNIFIER__BASIC_TOKEN environment variable."
        )
    elif not config.funifier.basic_token.lower().startswith("basic "):
        warnings.append("Funifier token does not start with 'Basic '.")

    try:
        load_workflow(config)
    except (CycleShiftError, FileNotFoundError) as e:
        errors.append(f"Workflow: {e}")

    if config.cycle.settle_delay == 0 and config.cycle.validation_timeout == 0:
        warnings.append(
            "settle_delay and validation_timeout are both 0. "
            "Validations may run before the schedulers' changes are visible."
        )

    if config.cycle.poll_interval > config.cycle.validation_timeout > 0:
        warnings.append(
            f"poll_interval ({config.cycle.poll_interval:g}s) is longer than "
            f"validation_timeout ({config.cycle.validation_timeout:g}s)."
        )

    if errors:
        console.print("[bold red]Errors:[/]")
        for error in errors:
            console.print(f"  [red]- {error}[/]")
        console.print()

    if warnings:
        console.print("[bold yellow]Warnings:[/]")
        for warning in warnings:
            console.print(f"  [yellow]- {warning}[/]")
        console.print()

    if not errors and not warnings:
        console.print("[bold green]Configuration is valid![/]")
    elif errors:
        raise typer.Exit(1)


@app.command("init")
def config_init(
    config_file: str = typer.Option(
        "cycleshift.yaml",
        "--output",
        "-o",
        help="Output file path",
    ),
):
    """Initialize a new configuration file."""
    init_config(config_file)


def init_config(config_file: str) -> None:
    """Create a new configuration file with default values."""
    from cycleshift.models.config import CycleConfig, FunifierConfig, LoggingConfig
    import yaml

    default_config = {
        # Note: the token should be set via environment variable
        "funifier": FunifierConfig().model_dump(exclude={"basic_token"}),
        "cycle": CycleConfig().model_dump(exclude_none=True),
        "logging": LoggingConfig().model_dump(exclude_none=True),
    }

    config_path = Path(config_file)

    if config_path.exists():
        overwrite = typer.confirm(f"{config_file} already exists. Overwrite?")
        if not overwrite:
            console.print("[yellow]Cancelled[/]")
            return

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(default_config, f, default_flow_style=False, sort_keys=False)

    console.print(f"[green]Configuration saved to {config_file}[/]")
    console.print("\n[bold]Next steps:[/]")
    console.print("1. Set your Funifier token:")
    console.print("   [dim]export CYCLESHIFT_FUNIFIER__BASIC_TOKEN='Basic <token>'[/]")
    console.print("\n2. Review the plan:")
    console.print("   [dim]cycleshift cycle plan[/]")


@app.command("env")
def config_env():
    """Show environment variables used by cycleshift."""
    from cycleshift.models.config import ENVIRONMENT_VARIABLES

    table = Table(title="Environment Variables")
    table.add_column("Variable", style="bold")
    table.add_column("Description")
    table.add_column("Status")

    for var, desc in ENVIRONMENT_VARIABLES.items():
        value = os.environ.get(var)
        if value:
            # Mask sensitive values
            if "TOKEN" in var:
                status = f"[green]Set[/] ({value[:8]}...)"
            else:
                status = f"[green]{value}[/]"
        else:
            status = "[dim]Not set[/]"

        table.add_row(var, desc, status)

    console.print(table)
