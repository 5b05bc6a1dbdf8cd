"""
Exception hierarchy for cycleshift.

Only lifecycle misuse (UsageError) is raised to callers of the engine.
Job and validation failures are recorded on the step that produced them.
"""

from __future__ import annotations


class CycleShiftError(Exception):
    """Base class for all cycleshift errors."""


class UsageError(CycleShiftError):
    """An engine operation was called at the wrong point of the lifecycle."""


class InvalidStateError(UsageError):
    """The current run (or step) is not in a state that allows the operation."""


class WorkflowDefinitionError(CycleShiftError):
    """A workflow definition could not be loaded or is invalid."""


class JobExecutionError(CycleShiftError):
    """A remote scheduler job could not be executed."""

    def __init__(self, job_id: str, message: str):
        self.job_id = job_id
        self.message = message
        super().__init__(f"Job {job_id} failed: {message}")


class ValidationError(CycleShiftError):
    """A post-job clearance check failed or could not be performed."""

    def __init__(self, validation_key: str, message: str):
        self.validation_key = validation_key
        self.message = message
        super().__init__(f"Validation {validation_key} failed: {message}")


class UnexpectedError(CycleShiftError):
    """Anything else that interrupted a run."""

    def __init__(self, step_id: str | None, original: BaseException):
        self.step_id = step_id
        self.original = original
        super().__init__(f"Unexpected error in {step_id or 'run'}: {original}")


class FunifierAPIError(CycleShiftError):
    """An HTTP call to the Funifier API failed."""

    def __init__(self, operation: str, message: str, status_code: int | None = None):
        self.operation = operation
        self.message = message
        self.status_code = status_code
        detail = f" (HTTP {status_code})" if status_code else ""
        super().__init__(f"Funifier {operation} failed{detail}: {message}")
