"""
Job Runner contract.

The engine only talks to the gamification platform through this interface,
so tests and alternative backends can provide their own implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from cycleshift.models.clearance import (
    ChallengeProgressClearance,
    LockedPointsClearance,
    PointsClearance,
    VirtualGoodsClearance,
)
from cycleshift.models.cycle import JobExecutionResult


class JobRunner(ABC):
    """
    Executes remote scheduler jobs and reports whether players were cleared.

    Subclasses must implement every method; all of them are coroutines
    because each one is a network round trip.
    """

    @abstractmethod
    async def execute_job(self, job_id: str) -> JobExecutionResult:
        """Run a scheduler job by id."""

    @abstractmethod
    async def check_points_cleared(self) -> PointsClearance:
        """Check that no player holds unlocked points."""

    @abstractmethod
    async def check_locked_points_cleared(self) -> LockedPointsClearance:
        """Check that no player holds locked points."""

    @abstractmethod
    async def check_challenge_progress_cleared(self) -> ChallengeProgressClearance:
        """Check that challenge progress was reset."""

    @abstractmethod
    async def check_virtual_goods_cleared(self) -> VirtualGoodsClearance:
        """Check that virtual goods were reset."""

    @abstractmethod
    async def get_job_logs(self, job_id: str, **filters: Any) -> list[dict[str, Any]]:
        """Fetch execution logs of a scheduler job."""
