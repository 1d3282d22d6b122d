"""Workflow contexts and dot-path document access."""

from .base import WorkflowContext
from .database import FIELD_MAP, DatabaseWorkflowContext
from .virtual import VirtualWorkflowContext

__all__ = [
    "WorkflowContext",
    "VirtualWorkflowContext",
    "DatabaseWorkflowContext",
    "FIELD_MAP",
]
