"""
Workflow definitions for cycleshift.

- YAML-based workflow definitions
- Workflow loading and validation
"""

from cycleshift.workflows.loader import (
    WorkflowLoader,
    WorkflowDefinition,
    StepTemplate,
    ValidationKey,
    load_default_workflow,
)

__all__ = [
    "WorkflowLoader",
    "WorkflowDefinition",
    "StepTemplate",
    "ValidationKey",
    "load_default_workflow",
]
