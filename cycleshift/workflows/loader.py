"""
Workflow loader for cycleshift.

Loads and validates cycle change workflow definitions from YAML files.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from cycleshift.exceptions import WorkflowDefinitionError
from cycleshift.models.cycle import CycleStep


CYCLE_CHANGE_STEP_COUNT = 4


class ValidationKey(str, Enum):
    """Clearance checks that can follow a scheduler job."""

    POINTS_CLEARED = "points_cleared"
    LOCKED_POINTS_CLEARED = "locked_points_cleared"
    CHALLENGE_PROGRESS_CLEARED = "challenge_progress_cleared"
    VIRTUAL_GOODS_CLEARED = "virtual_goods_cleared"


class StepTemplate(BaseModel):
    """A single step of a workflow definition."""

    model_config = ConfigDict(frozen=True)

    job_id: str = Field(min_length=1, description="Remote scheduler identifier")
    name: str = Field(min_length=1, description="Display name")
    description: str = Field(default="", description="Step description")
    validation_key: ValidationKey = Field(description="Check to run after the job")


class WorkflowDefinition(BaseModel):
    """An ordered, immutable list of cycle change steps."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Workflow name")
    version: str = Field(default="1.0", description="Workflow version")
    description: str = Field(default="", description="Workflow description")
    steps: tuple[StepTemplate, ...] = Field(default_factory=tuple, description="Steps in execution order")

    @field_validator("steps", mode="before")
    @classmethod
    def convert_steps(cls, v: Any) -> tuple:
        """Accept any sequence of step mappings."""
        if not v:
            return ()
        return tuple(v)

    def build_steps(self) -> list[CycleStep]:
        """Create fresh pending steps for a new run."""
        return [
            CycleStep(
                id=f"step_{index + 1}",
                name=template.name,
                description=template.description,
                job_id=template.job_id,
                validation_key=template.validation_key.value,
            )
            for index, template in enumerate(self.steps)
        ]

    def get_job_ids(self) -> list[str]:
        """Get the scheduler ids in execution order."""
        return [step.job_id for step in self.steps]


class WorkflowLoader:
    """
    Loads workflow definitions from YAML files.

    Example:
        >>> loader = WorkflowLoader()
        >>> workflow = loader.load("cycle_change")
        >>> print(workflow.name)
    """

    def __init__(self, workflow_dirs: list[Path] | None = None):
        """
        Initialize the loader.

        Args:
            workflow_dirs: Extra directories to search for workflows
        """
        builtin_dir = Path(__file__).parent / "builtin"
        self.workflow_dirs = [builtin_dir]

        if workflow_dirs:
            self.workflow_dirs.extend(workflow_dirs)

    def load(self, name: str) -> WorkflowDefinition:
        """
        Load a workflow by name.

        Args:
            name: Workflow name (without .yaml extension)

        Returns:
            Loaded workflow

        Raises:
            FileNotFoundError: If workflow not found
        """
        for dir_path in self.workflow_dirs:
            yaml_path = dir_path / f"{name}.yaml"
            if yaml_path.exists():
                return self.load_file(yaml_path)

            yml_path = dir_path / f"{name}.yml"
            if yml_path.exists():
                return self.load_file(yml_path)

        raise FileNotFoundError(f"Workflow not found: {name}")

    def load_file(self, path: str | Path) -> WorkflowDefinition:
        """
        Load a workflow from a file path.

        Args:
            path: Path to YAML file

        Returns:
            Loaded workflow
        """
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        return self._parse(data, source=str(path))

    def load_from_string(self, content: str) -> WorkflowDefinition:
        """
        Load a workflow from a YAML string.

        Args:
            content: YAML content

        Returns:
            Loaded workflow
        """
        data = yaml.safe_load(content)
        return self._parse(data, source="<string>")

    def list_available(self) -> list[str]:
        """
        List all available workflow names.

        Returns:
            List of workflow names
        """
        workflows = set()

        for dir_path in self.workflow_dirs:
            if not dir_path.exists():
                continue

            for file_path in dir_path.glob("*.yaml"):
                workflows.add(file_path.stem)

            for file_path in dir_path.glob("*.yml"):
                workflows.add(file_path.stem)

        return sorted(workflows)

    def validate(self, workflow: WorkflowDefinition) -> list[str]:
        """
        Validate a workflow.

        Args:
            workflow: Workflow to validate

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not workflow.name:
            errors.append("Workflow name is required")

        if not workflow.steps:
            errors.append("Workflow must have at least one step")

        seen: set[str] = set()
        for index, step in enumerate(workflow.steps, start=1):
            if step.job_id in seen:
                errors.append(f"Step {index} repeats scheduler '{step.job_id}'")
            seen.add(step.job_id)

        if workflow.name == "cycle_change" and len(workflow.steps) != CYCLE_CHANGE_STEP_COUNT:
            errors.append(
                f"Cycle change requires exactly {CYCLE_CHANGE_STEP_COUNT} steps, "
                f"found {len(workflow.steps)}"
            )

        return errors

    @staticmethod
    def _parse(data: Any, source: str) -> WorkflowDefinition:
        if not isinstance(data, dict):
            raise WorkflowDefinitionError(f"Workflow {source} must be a mapping")
        try:
            return WorkflowDefinition.model_validate(data)
        except PydanticValidationError as e:
            raise WorkflowDefinitionError(f"Invalid workflow {source}: {e}") from e


def load_default_workflow() -> WorkflowDefinition:
    """Load the builtin cycle change workflow."""
    return WorkflowLoader().load("cycle_change")
