"""
UI components for cycleshift CLI.
"""

from cycleshift.cli.ui.console import (
    console,
    show_banner,
    format_status,
    print_error,
    print_warning,
    print_success,
    print_info,
)
from cycleshift.cli.ui.panels import (
    create_workflow_table,
    create_steps_table,
    create_summary_panel,
    create_logs_table,
)
from cycleshift.cli.ui.progress import CycleProgress

__all__ = [
    # Console
    "console",
    "show_banner",
    "format_status",
    "print_error",
    "print_warning",
    "print_success",
    "print_info",
    # Panels
    "create_workflow_table",
    "create_steps_table",
    "create_summary_panel",
    "create_logs_table",
    # Progress
    "CycleProgress",
]
