"""
Cycle change run and step models.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from cycleshift.exceptions import InvalidStateError


class StepStatus(str, Enum):
    """Status of a single cycle change step."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class RunStatus(str, Enum):
    """Overall status of a cycle change run."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        """Whether the run can no longer change without a reset."""
        return self in (RunStatus.COMPLETED, RunStatus.FAILED, RunStatus.CANCELLED)


class JobExecutionResult(BaseModel):
    """Outcome of executing a remote scheduler job."""

    success: bool = Field(description="Whether the scheduler ran")
    message: str = Field(description="Human-readable outcome")
    executed_at: datetime = Field(default_factory=datetime.now)
    logs: list[str] = Field(default_factory=list, description="Log lines returned by the scheduler")


class ValidationResult(BaseModel):
    """Outcome of a post-job clearance check."""

    success: bool = Field(description="Whether every player was cleared")
    message: str = Field(description="Human-readable verdict")
    details: dict[str, Any] | None = Field(default=None, description="Raw check payload")
    attempts: int = Field(default=1, ge=1, description="Number of checks performed")


class CycleStep(BaseModel):
    """One ordered unit of the cycle change: a scheduler job plus its validation."""

    id: str = Field(description="Ordinal step id (step_1, step_2, ...)")
    name: str = Field(description="Display name")
    description: str = Field(default="")
    job_id: str = Field(description="Remote scheduler identifier")
    validation_key: str = Field(description="Clearance check run after the job")

    status: StepStatus = Field(default=StepStatus.PENDING)
    started_at: datetime | None = Field(default=None)
    ended_at: datetime | None = Field(default=None)
    job_result: JobExecutionResult | None = Field(default=None)
    validation_result: ValidationResult | None = Field(default=None)

    def mark_running(self) -> None:
        """Move from pending to running."""
        if self.status != StepStatus.PENDING:
            raise InvalidStateError(f"Step {self.id} cannot start from status '{self.status.value}'")
        self.status = StepStatus.RUNNING
        self.started_at = datetime.now()

    def mark_completed(self) -> None:
        """Move from running to completed."""
        self._finish(StepStatus.COMPLETED)

    def mark_failed(self) -> None:
        """Move from running to failed."""
        self._finish(StepStatus.FAILED)

    def _finish(self, status: StepStatus) -> None:
        if self.status != StepStatus.RUNNING:
            raise InvalidStateError(
                f"Step {self.id} cannot become '{status.value}' from status '{self.status.value}'"
            )
        self.status = status
        self.ended_at = datetime.now()

    @property
    def duration(self) -> float | None:
        """Step duration in seconds, if it has finished."""
        if self.started_at and self.ended_at:
            return (self.ended_at - self.started_at).total_seconds()
        return None

    @property
    def message(self) -> str:
        """The most relevant message for display."""
        if self.validation_result:
            return self.validation_result.message
        if self.job_result:
            return self.job_result.message
        return ""


class CycleSummary(BaseModel):
    """Derived view of a run."""

    total_steps: int
    completed_steps: int
    failed_steps: int
    duration: float | None = Field(default=None, description="Run duration in seconds")
    status: RunStatus


class CycleRun(BaseModel):
    """
    One end-to-end execution attempt of the cycle change.

    Owned and mutated by the engine only; everything else receives copies.
    """

    current_step: int = Field(default=0, ge=0)
    total_steps: int = Field(default=0, ge=0)
    steps: list[CycleStep] = Field(default_factory=list)
    running: bool = Field(default=False)
    started_at: datetime | None = Field(default=None)
    ended_at: datetime | None = Field(default=None)
    status: RunStatus = Field(default=RunStatus.NOT_STARTED)
    error: str | None = Field(default=None, description="Unexpected error that stopped the run")

    @property
    def completed_steps(self) -> int:
        """Number of completed steps."""
        return sum(1 for s in self.steps if s.status == StepStatus.COMPLETED)

    @property
    def failed_steps(self) -> int:
        """Number of failed steps."""
        return sum(1 for s in self.steps if s.status == StepStatus.FAILED)

    @property
    def active_step(self) -> CycleStep | None:
        """The step at the current index."""
        if 0 <= self.current_step < len(self.steps):
            return self.steps[self.current_step]
        return None

    @property
    def duration(self) -> float | None:
        """Elapsed seconds, measured to now while the run has not ended."""
        if not self.started_at:
            return None
        end = self.ended_at or datetime.now()
        return (end - self.started_at).total_seconds()

    def summary(self) -> CycleSummary:
        """Build the summary view."""
        return CycleSummary(
            total_steps=self.total_steps,
            completed_steps=self.completed_steps,
            failed_steps=self.failed_steps,
            duration=self.duration,
            status=self.status,
        )
