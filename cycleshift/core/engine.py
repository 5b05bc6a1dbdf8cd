"""
Cycle change engine for cycleshift.

Runs the workflow steps strictly in order, confirming each scheduler's side
effects before moving on, and publishes the run after every transition.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Callable

from cycleshift.core.publisher import ProgressCallback, ProgressPublisher
from cycleshift.core.validator import StepValidator
from cycleshift.exceptions import InvalidStateError, JobExecutionError, UnexpectedError
from cycleshift.funifier.base import JobRunner
from cycleshift.models.config import CycleConfig
from cycleshift.models.cycle import (
    CycleRun,
    CycleStep,
    CycleSummary,
    JobExecutionResult,
    RunStatus,
    StepStatus,
    ValidationResult,
)
from cycleshift.utils.logger import get_logger, log_step_result
from cycleshift.workflows.loader import WorkflowDefinition, load_default_workflow

logger = get_logger("cycleshift.engine")

CANCELLED_MESSAGE = "Processo cancelado pelo usuário"


class CycleChangeEngine:
    """
    Owns a single in-memory run of the cycle change workflow.

    Lifecycle: initialize() -> start() -> (cancel()) -> reset().
    Only lifecycle misuse raises; step failures are recorded on the run.

    Example:
        >>> engine = CycleChangeEngine(FunifierClient(config.funifier), cycle=config.cycle)
        >>> engine.subscribe(lambda run: print(run.status if run else "reset"))
        >>> engine.initialize()
        >>> await engine.start()
        >>> print(engine.get_cycle_change_summary())
    """

    def __init__(
        self,
        job_runner: JobRunner,
        definition: WorkflowDefinition | None = None,
        validator: StepValidator | None = None,
        publisher: ProgressPublisher | None = None,
        cycle: CycleConfig | None = None,
    ):
        """
        Initialize the engine.

        Args:
            job_runner: Executes scheduler jobs and fetches their logs
            definition: Workflow to run (builtin cycle change if not provided)
            validator: Clearance checker (built on job_runner if not provided)
            publisher: Progress publisher (a private one if not provided)
            cycle: Timing settings (settle delay, polling, log limit)
        """
        self.job_runner = job_runner
        self.definition = definition or load_default_workflow()
        self.validator = validator or StepValidator(job_runner)
        self.publisher = publisher or ProgressPublisher()
        self.cycle = cycle or CycleConfig()

        self._run: CycleRun | None = None
        self._loop_active = False

    # ==================== LIFECYCLE ====================

    def initialize(self) -> CycleRun:
        """
        Build a fresh run with every step pending.

        Raises:
            InvalidStateError: If the current run is still running
        """
        if self._run is not None and self._run.running:
            raise InvalidStateError("Cycle change is already running")

        steps = self.definition.build_steps()
        self._run = CycleRun(
            current_step=0,
            total_steps=len(steps),
            steps=steps,
            running=False,
            status=RunStatus.NOT_STARTED,
        )
        logger.info(f"Cycle change initialized with {len(steps)} steps")

        self._publish(self._run)
        return self._run.model_copy(deep=True)

    async def start(self) -> None:
        """
        Execute every step in order, stopping at the first failure.

        Raises:
            InvalidStateError: If there is no run, it is already running,
                it already finished, or a cancelled run is still unwinding
        """
        run = self._run
        if run is None:
            raise InvalidStateError("Cycle change not initialized. Call initialize() first.")
        if run.running:
            raise InvalidStateError("Cycle change is already running")
        if run.status.is_terminal:
            raise InvalidStateError(
                f"Cycle change already {run.status.value}. Call reset() and initialize() again."
            )
        if self._loop_active:
            raise InvalidStateError(
                "A cancelled cycle change is still finishing its current step"
            )

        self._loop_active = True
        run.running = True
        run.status = RunStatus.RUNNING
        run.started_at = datetime.now()
        logger.info(f"Cycle change started ({run.total_steps} steps)")
        self._publish(run)

        try:
            for index in range(len(run.steps)):
                if self._stopped(run):
                    break

                run.current_step = index
                await self._execute_step(run, run.steps[index])

                if self._stopped(run):
                    break

                if run.steps[index].status == StepStatus.FAILED:
                    run.status = RunStatus.FAILED
                    break

            if run.status == RunStatus.RUNNING:
                run.status = RunStatus.COMPLETED

        except Exception as e:
            error = UnexpectedError(run.steps[run.current_step].id if run.steps else None, e)
            logger.exception(str(error))
            run.error = str(e) or type(e).__name__
            if run.status != RunStatus.CANCELLED:
                run.status = RunStatus.FAILED

            step = run.active_step
            if step and step.status == StepStatus.RUNNING:
                step.mark_failed()

        finally:
            self._loop_active = False
            run.running = False
            run.ended_at = run.ended_at or datetime.now()
            logger.info(
                f"Cycle change finished: {run.status.value} "
                f"({run.completed_steps}/{run.total_steps} steps completed)",
                extra={"run_status": run.status.value},
            )
            self._publish(run)

    def cancel(self) -> None:
        """
        Cancel the running cycle change.

        Cooperative: an in-flight scheduler or validation call is not
        interrupted, the engine stops at the next step boundary. No-op when
        nothing is running.
        """
        run = self._run
        if run is None or not run.running:
            return

        run.running = False
        run.status = RunStatus.CANCELLED
        run.ended_at = datetime.now()

        step = run.active_step
        if step and step.status == StepStatus.RUNNING:
            step.mark_failed()
            if step.job_result is None:
                step.job_result = JobExecutionResult(success=False, message=CANCELLED_MESSAGE)
            else:
                step.validation_result = ValidationResult(success=False, message=CANCELLED_MESSAGE)

        logger.warning(f"Cycle change cancelled at step {run.current_step + 1}/{run.total_steps}")
        self._publish(run)

    def reset(self) -> None:
        """Discard the current run. A running run is cancelled first."""
        if self._run is not None and self._run.running:
            self.cancel()
        self._run = None
        self._publish(None)

    # ==================== QUERIES ====================

    def get_current_progress(self) -> CycleRun | None:
        """Get a snapshot of the current run."""
        if self._run is None:
            return None
        return self._run.model_copy(deep=True)

    def get_cycle_change_summary(self) -> CycleSummary | None:
        """Get totals, duration and status of the current run."""
        if self._run is None:
            return None
        return self._run.summary()

    async def get_step_logs(self, step_index: int) -> list[dict[str, Any]]:
        """
        Fetch the remote scheduler logs of a step.

        Args:
            step_index: 0-based step index

        Returns:
            Log entries, newest first (empty on any error)
        """
        run = self._run
        if run is None or not 0 <= step_index < len(run.steps):
            return []

        step = run.steps[step_index]
        try:
            return await self.job_runner.get_job_logs(
                step.job_id,
                max_results=self.cycle.log_limit,
                orderby="time",
                reverse=True,
            )
        except Exception as e:
            logger.warning(f"Error getting logs for step {step_index}: {e}")
            return []

    def subscribe(self, callback: ProgressCallback) -> Callable[[], None]:
        """Subscribe to progress updates; returns the unsubscribe function."""
        return self.publisher.subscribe(callback)

    # ==================== EXECUTION ====================

    async def _execute_step(self, run: CycleRun, step: CycleStep) -> None:
        """Run one step: scheduler job, settle, validation."""
        step.mark_running()
        logger.info(f"Executing step {step.id}: {step.name} ({step.job_id})")
        self._publish(run)

        try:
            result = await self._run_job(step)
        except JobExecutionError as e:
            logger.error(str(e))
            result = JobExecutionResult(success=False, message=e.message)

        if self._stopped(run):
            logger.info(f"Ignoring result of {step.id}: cycle change was cancelled")
            return

        step.job_result = result
        if not result.success:
            step.mark_failed()
            log_step_result(logger, step)
            self._publish(run)
            return

        validation = await self._await_validation(run, step)
        if validation is None:
            return

        step.validation_result = validation
        if validation.success:
            step.mark_completed()
        else:
            step.mark_failed()

        log_step_result(logger, step)
        self._publish(run)

    async def _run_job(self, step: CycleStep) -> JobExecutionResult:
        try:
            return await self.job_runner.execute_job(step.job_id)
        except Exception as e:
            raise JobExecutionError(step.job_id, str(e) or type(e).__name__) from e

    async def _await_validation(self, run: CycleRun, step: CycleStep) -> ValidationResult | None:
        """
        Wait for the scheduler's side effects and validate them.

        Waits the settle delay, then re-checks every poll interval until the
        validation passes or the validation timeout elapses. Returns None if
        the run was cancelled meanwhile.
        """
        await asyncio.sleep(self.cycle.settle_delay)

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.cycle.validation_timeout
        attempts = 0

        while True:
            if self._stopped(run):
                return None

            attempts += 1
            result = await self.validator.validate(step.validation_key)
            result.attempts = attempts

            if result.success or loop.time() >= deadline:
                break

            logger.info(
                f"{step.id} not cleared yet (attempt {attempts}): {result.message}; "
                f"retrying in {self.cycle.poll_interval:.0f}s"
            )
            await asyncio.sleep(self.cycle.poll_interval)

        if self._stopped(run):
            return None
        return result

    def _stopped(self, run: CycleRun) -> bool:
        """Whether the loop driving `run` should stop touching it."""
        return run.status == RunStatus.CANCELLED or run is not self._run

    def _publish(self, run: CycleRun | None) -> None:
        if run is not None and run is not self._run:
            return
        self.publisher.publish(run)
