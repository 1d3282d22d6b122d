"""Content workflow execution engine.

Runs ordered sequences of content transformation steps against either a
stored record or an in-memory translation payload.
"""

from .context import DatabaseWorkflowContext, VirtualWorkflowContext, WorkflowContext
from .exceptions import ConfigurationError, RecordStoreError, StepExecutionError, WorkflowError
from .orchestration import (
    WorkflowDefinition,
    WorkflowDispatcher,
    WorkflowExecutor,
    WorkflowRegistry,
    WorkflowResult,
    WorkflowRunner,
)
from .steps import LegacyStep, LegacyStepAdapter, WorkflowStep

__version__ = "1.0.0"

__all__ = [
    "WorkflowContext",
    "VirtualWorkflowContext",
    "DatabaseWorkflowContext",
    "WorkflowError",
    "StepExecutionError",
    "ConfigurationError",
    "RecordStoreError",
    "WorkflowDefinition",
    "WorkflowDispatcher",
    "WorkflowExecutor",
    "WorkflowRegistry",
    "WorkflowResult",
    "WorkflowRunner",
    "WorkflowStep",
    "LegacyStep",
    "LegacyStepAdapter",
]
