"""Global pytest fixtures and configuration.

This module provides shared fixtures for all tests including:
- Isolation of the process-wide registry and configuration
- In-memory host collaborators (records, languages, terms, workflows)
- A registry and runner wired to those collaborators
"""
from __future__ import annotations

import pytest

from content_workflows.collaborators import (
    HostRuntime,
    InMemoryLanguageRelations,
    InMemoryRecordStore,
    InMemoryTermTranslations,
    InMemoryWorkflowStore,
)
from content_workflows.config import WorkflowConfig, reset_config
from content_workflows.orchestration import WorkflowRegistry, WorkflowRunner
from content_workflows.services import LogSink

WORKFLOW_ENV_VARS = (
    "WORKFLOW_CONTINUE_ON_ERROR",
    "WORKFLOW_SKIP_INCOMPATIBLE",
    "WORKFLOW_AUTO_COMMIT",
    "WORKFLOW_DEFAULT_SOURCE_LANGUAGE",
    "WORKFLOW_SOURCE_LANGUAGE_META_KEY",
    "WORKFLOW_ENABLE_VIRTUAL",
    "LOG_LEVEL",
    "LOG_DIR",
    "LOG_TO_FILE",
)


@pytest.fixture(autouse=True)
def isolated_engine(monkeypatch):
    """Start every test with default settings and no shared registry.

    Args:
        monkeypatch: Pytest's monkeypatch fixture for modifying environment variables.
    """
    for name in WORKFLOW_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    WorkflowRegistry.reset()
    yield
    reset_config()
    WorkflowRegistry.reset()


@pytest.fixture
def config() -> WorkflowConfig:
    """Default engine configuration (continue on error, skip incompatible, auto commit)."""
    return WorkflowConfig()


@pytest.fixture
def record_store() -> InMemoryRecordStore:
    """Record store holding an English post (1) and its German translation (2).

    Returns:
        Populated InMemoryRecordStore
    """
    store = InMemoryRecordStore()
    store.add_record(
        1,
        title="Hello world",
        content="First paragraph.",
        summary="Short intro",
        slug="hello-world",
        metadata={"seo_title": "Hello", "_edit_lock": "123"},
        categories=[{"id": 10, "slug": "news", "name": "News"}],
        tags=[{"id": 20, "slug": "python", "name": "Python"}],
    )
    store.add_record(
        2,
        title="Hallo Welt",
        content="Erster Absatz.",
        summary="",
        slug="hallo-welt",
        metadata={"seo_title": "Hallo", "_polytrans_source_language": "en"},
        categories=[{"id": 10, "slug": "news", "name": "News"}],
    )
    return store


@pytest.fixture
def languages() -> InMemoryLanguageRelations:
    """Posts 1 (en) and 2 (de) in one translation group."""
    relations = InMemoryLanguageRelations()
    relations.link_translations({"en": 1, "de": 2})
    return relations


@pytest.fixture
def terms() -> InMemoryTermTranslations:
    """Terms with English and German versions.

    - category news (10, en) <-> nachrichten (11, de)
    - post_tag python (20, en) with no German version
    """
    store = InMemoryTermTranslations()
    store.add_term("category", "news", "News", language="en", term_id=10)
    store.add_term("category", "nachrichten", "Nachrichten", language="de", term_id=11)
    store.link_translations({"en": 10, "de": 11})
    store.add_term("post_tag", "python", "Python", language="en", term_id=20)
    return store


@pytest.fixture
def log_sink() -> LogSink:
    return LogSink()


@pytest.fixture
def host(record_store, languages, terms, log_sink) -> HostRuntime:
    """Host runtime built from the in-memory collaborators."""
    return HostRuntime(
        records=record_store,
        languages=languages,
        terms=terms,
        workflows=InMemoryWorkflowStore(),
        log_sink=log_sink,
    )


@pytest.fixture
def registry(host, config) -> WorkflowRegistry:
    """Registry with the default steps and services for the test host."""
    return WorkflowRegistry(host=host, config=config)


@pytest.fixture
def runner(registry) -> WorkflowRunner:
    return WorkflowRunner(registry)
