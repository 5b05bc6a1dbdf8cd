"""
Core cycle change orchestration.

- CycleChangeEngine: runs the workflow and owns the run state
- StepValidator: clearance checks after each scheduler
- ProgressPublisher: broadcasts the run to subscribers
"""

from cycleshift.core.engine import CycleChangeEngine
from cycleshift.core.publisher import ProgressPublisher
from cycleshift.core.validator import StepValidator

__all__ = [
    "CycleChangeEngine",
    "ProgressPublisher",
    "StepValidator",
]
