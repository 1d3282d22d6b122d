"""Validated models for externally supplied workflow data."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WorkflowDefinition(BaseModel):
    """Workflow definition as stored by the host.

    Steps stay plain dicts: their parameters depend on the step type and are
    validated by the step itself.
    """

    model_config = ConfigDict(extra="allow")

    id: str = ""
    name: str = ""
    description: str = ""
    language: str = ""
    enabled: bool = True
    steps: List[Dict[str, Any]] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        """Numeric ids from storage become strings."""
        if v is None:
            return ""
        return str(v)

    @field_validator("steps", mode="before")
    @classmethod
    def validate_steps(cls, v):
        """Each step must be a mapping."""
        if v is None:
            return []
        if not isinstance(v, list):
            raise ValueError("steps must be a list")
        for i, step in enumerate(v):
            if not isinstance(step, Mapping):
                raise ValueError(f"Step {i} must be an object")
        return [dict(step) for step in v]

    def step_ids(self) -> List[Optional[str]]:
        """Identifier of each step config, None where it has none."""
        return [step_identifier(step) for step in self.steps]


class RunOptions(BaseModel):
    """Options accepted by ``WorkflowRunner.run_on_post``."""

    model_config = ConfigDict(extra="ignore")

    auto_commit: Optional[bool] = None
    source_language: str = ""
    target_language: str = ""

    def has_explicit_languages(self) -> bool:
        return bool(self.source_language and self.target_language)


WorkflowLike = Union[WorkflowDefinition, Mapping[str, Any]]


def step_identifier(step_config: Mapping[str, Any]) -> Optional[str]:
    """Return the step type named by a step config (``type`` first, then ``id``)."""
    if not isinstance(step_config, Mapping):
        return None
    step_id = step_config.get("type") or step_config.get("id")
    return str(step_id) if step_id else None


def workflow_steps(workflow: WorkflowLike) -> List[Dict[str, Any]]:
    """Return the step configs of a definition model or a raw mapping."""
    if isinstance(workflow, WorkflowDefinition):
        return workflow.steps
    steps = workflow.get("steps") or []
    return list(steps) if isinstance(steps, list) else []


def workflow_label(workflow: WorkflowLike) -> str:
    if isinstance(workflow, WorkflowDefinition):
        return workflow.name or workflow.id or "workflow"
    return str(workflow.get("name") or workflow.get("id") or "workflow")
