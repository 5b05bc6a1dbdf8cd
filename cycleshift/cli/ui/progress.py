"""
Progress tracking for cycleshift CLI.

Provides a live-updating display of a cycle change run using Rich.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Generator

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.text import Text

from cycleshift.cli.ui.console import format_status
from cycleshift.cli.ui.panels import create_steps_table

if TYPE_CHECKING:
    from cycleshift.models.cycle import CycleRun


class CycleProgress:
    """
    Real-time progress display for a cycle change.

    Instances are progress callbacks: subscribe one to the engine and every
    published snapshot redraws the display.

    Example:
        >>> progress = CycleProgress(console)
        >>> unsubscribe = engine.subscribe(progress)
        >>> with progress.live():
        ...     await engine.start()
    """

    def __init__(self, console: Console | None = None):
        """
        Initialize the progress display.

        Args:
            console: Rich console to use (creates new if not provided)
        """
        self.console = console or Console()
        self._run: CycleRun | None = None
        self._live: Live | None = None

        self._progress_bar = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(bar_width=30),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=self.console,
        )
        self._task_id = self._progress_bar.add_task("Waiting...", total=1)

    def __call__(self, run: CycleRun | None) -> None:
        """Receive a published snapshot."""
        self._run = run
        if run is not None:
            done = run.completed_steps + run.failed_steps
            step = run.active_step
            description = step.name if step and run.running else run.status.value.replace("_", " ")
            self._progress_bar.update(
                self._task_id,
                total=max(run.total_steps, 1),
                completed=done,
                description=description,
            )
        self._refresh()

    @contextmanager
    def live(self) -> Generator[None, None, None]:
        """Context manager for the live display."""
        with Live(
            self._render(),
            console=self.console,
            refresh_per_second=4,
            transient=False,
        ) as live:
            self._live = live
            try:
                yield
            finally:
                live.update(self._render())
                self._live = None

    def _refresh(self) -> None:
        if self._live:
            self._live.update(self._render())

    def _render(self) -> Panel:
        if self._run is None:
            return Panel(Text("No cycle change in progress", style="dim"), title="[bold]Cycle Change[/]")

        title = f"[bold]Cycle Change[/] {format_status(self._run.status.value)}"
        return Panel(
            Group(self._progress_bar, create_steps_table(self._run)),
            title=title,
            border_style="blue",
        )
