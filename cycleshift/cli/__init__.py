"""
Command-line interface for cycleshift.
"""

from cycleshift.cli.app import app, main

__all__ = ["app", "main"]
