"""
Clearance reports returned by the Job Runner checks.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ClearanceReport(BaseModel):
    """Common fields of every "all players cleared" check."""

    all_cleared: bool = Field(description="Whether no offending player was found")
    total_players_checked: int = Field(default=0, ge=0)

    @property
    def offenders(self) -> list[str]:
        """Ids of players that are not cleared."""
        return []


class PointsClearance(ClearanceReport):
    """Players still holding unlocked points."""

    players_with_points: list[str] = Field(default_factory=list)

    @property
    def offenders(self) -> list[str]:
        return self.players_with_points


class LockedPointsClearance(ClearanceReport):
    """Players still holding locked points."""

    players_with_locked_points: list[str] = Field(default_factory=list)

    @property
    def offenders(self) -> list[str]:
        return self.players_with_locked_points


class ChallengeProgressClearance(ClearanceReport):
    """Players (or the system action log) still carrying challenge progress."""

    players_with_progress: list[str] = Field(default_factory=list)

    @property
    def offenders(self) -> list[str]:
        return self.players_with_progress


class VirtualGoodsClearance(ClearanceReport):
    """Players whose catalog items were not reset."""

    players_with_extra_items: list[str] = Field(default_factory=list)

    @property
    def offenders(self) -> list[str]:
        return self.players_with_extra_items
