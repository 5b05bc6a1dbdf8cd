"""cycleshift models package."""

from cycleshift.models.config import (
    CycleShiftConfig,
    FunifierConfig,
    CycleConfig,
    LoggingConfig,
)
from cycleshift.models.cycle import (
    CycleRun,
    CycleStep,
    CycleSummary,
    JobExecutionResult,
    RunStatus,
    StepStatus,
    ValidationResult,
)
from cycleshift.models.clearance import (
    ChallengeProgressClearance,
    ClearanceReport,
    LockedPointsClearance,
    PointsClearance,
    VirtualGoodsClearance,
)

__all__ = [
    # Config
    "CycleShiftConfig",
    "FunifierConfig",
    "CycleConfig",
    "LoggingConfig",
    # Cycle
    "CycleRun",
    "CycleStep",
    "CycleSummary",
    "JobExecutionResult",
    "RunStatus",
    "StepStatus",
    "ValidationResult",
    # Clearance
    "ClearanceReport",
    "PointsClearance",
    "LockedPointsClearance",
    "ChallengeProgressClearance",
    "VirtualGoodsClearance",
]
