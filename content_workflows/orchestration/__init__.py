"""Workflow execution: result model, executor, registry, runner and dispatcher."""

from .definitions import RunOptions, WorkflowDefinition
from .dispatcher import WorkflowDispatcher
from .executor import CANCELLED_REASON, WorkflowExecutor
from .registry import WorkflowRegistry
from .result import ExecutedStep, FailedStep, SkippedStep, WorkflowResult
from .runner import WorkflowRunner

__all__ = [
    "RunOptions",
    "WorkflowDefinition",
    "WorkflowDispatcher",
    "CANCELLED_REASON",
    "WorkflowExecutor",
    "WorkflowRegistry",
    "ExecutedStep",
    "FailedStep",
    "SkippedStep",
    "WorkflowResult",
    "WorkflowRunner",
]
