"""
cycleshift - Funifier cycle-change orchestrator

Drives the periodic cycle change of a sales gamification program hosted on
Funifier: runs the reset schedulers in order and confirms that every player
was cleared before moving on to the next one.
"""

__version__ = "0.1.0"
__author__ = "cycleshift team"
__license__ = "MIT"

from cycleshift.models.config import CycleShiftConfig

__all__ = [
    "__version__",
    "CycleShiftConfig",
]
