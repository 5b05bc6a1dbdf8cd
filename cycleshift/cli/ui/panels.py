"""
Rich panels for cycleshift CLI.

Provides styled tables and panels for workflows, runs and scheduler logs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.console import Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from cycleshift.cli.ui.console import format_status
from cycleshift.models.cycle import StepStatus
from cycleshift.utils.helpers import format_duration, format_timestamp, truncate_string

if TYPE_CHECKING:
    from cycleshift.models.cycle import CycleRun, CycleSummary
    from cycleshift.workflows.loader import WorkflowDefinition


def create_workflow_table(definition: WorkflowDefinition) -> Table:
    """
    Create a table listing the steps a workflow will run.

    Args:
        definition: Workflow definition

    Returns:
        Rich Table with one row per step
    """
    table = Table(
        title=f"Workflow: {definition.name} v{definition.version}",
        show_header=True,
        header_style="bold",
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Step", style="bold")
    table.add_column("Scheduler", style="job")
    table.add_column("Validation")

    for index, step in enumerate(definition.steps, start=1):
        name = escape(step.name)
        if step.description:
            name += f"\n[dim]{escape(step.description)}[/]"
        table.add_row(str(index), name, step.job_id, step.validation_key.value)

    return table


def create_steps_table(run: CycleRun) -> Table:
    """
    Create a table with the live status of every step.

    Args:
        run: Run snapshot

    Returns:
        Rich Table with status, duration and latest message per step
    """
    table = Table(show_header=True, header_style="bold", expand=True)
    table.add_column("#", justify="right", style="dim", width=3)
    table.add_column("Step", ratio=3)
    table.add_column("Status", width=14)
    table.add_column("Time", justify="right", width=8)
    table.add_column("Message", ratio=2)

    for index, step in enumerate(run.steps, start=1):
        table.add_row(
            str(index),
            escape(truncate_string(step.name, 70)),
            format_status(step.status.value),
            format_duration(step.duration) if step.duration is not None else "",
            escape(truncate_string(step.message, 90)),
        )

    return table


def create_summary_panel(summary: CycleSummary, run: CycleRun | None = None) -> Panel:
    """
    Create a panel with the outcome of a run.

    Args:
        summary: Derived summary of the run
        run: The run itself, to show the failing step's details

    Returns:
        Rich Panel
    """
    content: list[Any] = [
        Text.from_markup(f"[bold]Status:[/] {format_status(summary.status.value)}"),
        Text.from_markup(
            f"[bold]Steps:[/] {summary.completed_steps}/{summary.total_steps} completed, "
            f"{summary.failed_steps} failed"
        ),
        Text.from_markup(f"[bold]Duration:[/] {format_duration(summary.duration)}"),
    ]

    if run is not None:
        failed = [s for s in run.steps if s.status == StepStatus.FAILED]
        for step in failed:
            content.append(Text())
            content.append(Text.from_markup(f"[failed]{step.id}[/] {escape(step.name)}"))
            if step.job_result:
                content.append(Text(f"  Job: {step.job_result.message}", style="dim"))
            if step.validation_result:
                content.append(Text(f"  Validation: {step.validation_result.message}", style="dim"))
        if run.error:
            content.append(Text())
            content.append(Text(f"Error: {run.error}", style="error"))

    border = {
        "completed": "green",
        "failed": "red",
        "cancelled": "magenta",
    }.get(summary.status.value, "blue")

    return Panel(
        Group(*content),
        title="[bold]Cycle Change Summary[/]",
        border_style=border,
    )


def create_logs_table(job_id: str, entries: list[dict[str, Any]]) -> Table:
    """
    Create a table of scheduler log entries.

    Args:
        job_id: Scheduler id
        entries: Log entries returned by the API

    Returns:
        Rich Table
    """
    table = Table(title=f"Scheduler logs: {job_id}", show_header=True, header_style="bold")
    table.add_column("Time", style="dim")
    table.add_column("Status")
    table.add_column("Message")

    for entry in entries:
        status = entry.get("status") or entry.get("type") or ""
        message = entry.get("message") or entry.get("log") or entry.get("result") or ""
        table.add_row(
            format_timestamp(entry.get("time")),
            escape(str(status)),
            escape(truncate_string(str(message), 120)),
        )

    return table
