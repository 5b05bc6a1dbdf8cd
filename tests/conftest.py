"""
Test configuration and fixtures.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from cycleshift.funifier.base import JobRunner
from cycleshift.models.clearance import (
    ChallengeProgressClearance,
    LockedPointsClearance,
    PointsClearance,
    VirtualGoodsClearance,
)
from cycleshift.models.config import CycleConfig
from cycleshift.models.cycle import JobExecutionResult
from cycleshift.workflows.loader import load_default_workflow


STEP_JOB_IDS = load_default_workflow().get_job_ids()


class FakeJobRunner(JobRunner):
    """
    In-process Job Runner.

    Every job succeeds and every check passes unless configured otherwise.
    All calls are recorded in `calls` in the order they happen.
    """

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.job_results: dict[str, JobExecutionResult] = {}
        self.job_errors: dict[str, Exception] = {}
        # validation key -> queue of offender lists, one per check (last one repeats)
        self.offenders: dict[str, list[list[str]]] = {}
        self.check_errors: dict[str, Exception] = {}
        self.log_entries: list[dict[str, Any]] = []
        self.log_error: Exception | None = None
        self.log_filters: dict[str, Any] = {}

        # job id -> event set when the job starts / event the job waits for
        self.job_started: dict[str, asyncio.Event] = {}
        self.job_gates: dict[str, asyncio.Event] = {}

    def block_job(self, job_id: str) -> None:
        """Make execute_job(job_id) wait until release_job() is called."""
        self.job_started[job_id] = asyncio.Event()
        self.job_gates[job_id] = asyncio.Event()

    def release_job(self, job_id: str) -> None:
        self.job_gates[job_id].set()

    async def execute_job(self, job_id: str) -> JobExecutionResult:
        self.calls.append(f"job:{job_id}")
        if job_id in self.job_started:
            self.job_started[job_id].set()
            await self.job_gates[job_id].wait()
        if job_id in self.job_errors:
            raise self.job_errors[job_id]
        return self.job_results.get(
            job_id, JobExecutionResult(success=True, message="Scheduler executed successfully")
        )

    def _next_offenders(self, key: str) -> list[str]:
        self.calls.append(f"check:{key}")
        if key in self.check_errors:
            raise self.check_errors[key]
        queue = self.offenders.get(key)
        if not queue:
            return []
        return queue.pop(0) if len(queue) > 1 else queue[0]

    async def check_points_cleared(self) -> PointsClearance:
        offenders = self._next_offenders("points_cleared")
        return PointsClearance(
            all_cleared=not offenders, players_with_points=offenders, total_players_checked=10
        )

    async def check_locked_points_cleared(self) -> LockedPointsClearance:
        offenders = self._next_offenders("locked_points_cleared")
        return LockedPointsClearance(
            all_cleared=not offenders, players_with_locked_points=offenders, total_players_checked=10
        )

    async def check_challenge_progress_cleared(self) -> ChallengeProgressClearance:
        offenders = self._next_offenders("challenge_progress_cleared")
        return ChallengeProgressClearance(
            all_cleared=not offenders, players_with_progress=offenders, total_players_checked=1
        )

    async def check_virtual_goods_cleared(self) -> VirtualGoodsClearance:
        offenders = self._next_offenders("virtual_goods_cleared")
        return VirtualGoodsClearance(
            all_cleared=not offenders, players_with_extra_items=offenders, total_players_checked=10
        )

    async def get_job_logs(self, job_id: str, **filters: Any) -> list[dict[str, Any]]:
        self.log_filters = {"job_id": job_id, **filters}
        if self.log_error:
            raise self.log_error
        return self.log_entries


@pytest.fixture
def job_runner() -> FakeJobRunner:
    """Job Runner where everything succeeds."""
    return FakeJobRunner()


@pytest.fixture
def fast_cycle() -> CycleConfig:
    """Cycle settings without waits: one validation check per step."""
    return CycleConfig(settle_delay=0, poll_interval=0, validation_timeout=0)


@pytest.fixture
def step_job_ids() -> list[str]:
    """Scheduler ids of the builtin cycle change, in order."""
    return list(STEP_JOB_IDS)
