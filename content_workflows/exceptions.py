"""Exception types raised by the workflow engine."""
from __future__ import annotations


class WorkflowError(Exception):
    """Base class for workflow engine errors."""


class StepExecutionError(WorkflowError):
    """Raised by a step when its transformation cannot complete."""

    def __init__(self, message: str, step_id: str | None = None):
        super().__init__(message)
        self.step_id = step_id


class ConfigurationError(WorkflowError):
    """Raised when the engine is wired up incorrectly."""


class RecordStoreError(WorkflowError):
    """Raised by a record accessor when a read or write fails."""
