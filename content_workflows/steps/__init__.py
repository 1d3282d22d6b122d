"""Workflow step contract, legacy adapter and built-in steps."""

from .apply_outputs import ApplyOutputsStep
from .base import Eligibility, WorkflowStep
from .legacy import LegacyStep, LegacyStepAdapter
from .resolve_taxonomy import ResolveTaxonomyStep

__all__ = [
    "Eligibility",
    "WorkflowStep",
    "LegacyStep",
    "LegacyStepAdapter",
    "ResolveTaxonomyStep",
    "ApplyOutputsStep",
]
