"""
Funifier integration for cycleshift.

- JobRunner: the contract the engine depends on
- FunifierClient: httpx implementation against the Funifier REST API
"""

from cycleshift.funifier.base import JobRunner
from cycleshift.funifier.client import FunifierClient

__all__ = [
    "JobRunner",
    "FunifierClient",
]
