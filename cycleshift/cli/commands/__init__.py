"""
CLI commands for cycleshift.
"""
