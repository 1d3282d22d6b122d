"""Interfaces to the host application and in-memory implementations."""

from .host import HostRuntime, LegacyStepSpec
from .languages import InMemoryLanguageRelations, LanguageRelations
from .records import RECORD_FIELDS, InMemoryRecordStore, RecordAccessor
from .terms import InMemoryTermTranslations, TermTranslations
from .workflows import InMemoryWorkflowStore, JsonFileWorkflowStore, WorkflowStore

__all__ = [
    "HostRuntime",
    "LegacyStepSpec",
    "LanguageRelations",
    "InMemoryLanguageRelations",
    "RECORD_FIELDS",
    "RecordAccessor",
    "InMemoryRecordStore",
    "TermTranslations",
    "InMemoryTermTranslations",
    "WorkflowStore",
    "InMemoryWorkflowStore",
    "JsonFileWorkflowStore",
]
