"""End-to-end workflow runs through the runner, registry and contexts."""

import pytest

from mocks.workflow_steps import (
    AppendMarkerStep,
    FailingStep,
    RequiresExcerptStep,
    RequiresServiceStep,
    SummaryLegacyStep,
    UppercaseTitleStep,
)

from content_workflows.collaborators import HostRuntime, LegacyStepSpec
from content_workflows.config import WorkflowConfig
from content_workflows.context import DatabaseWorkflowContext, VirtualWorkflowContext
from content_workflows.orchestration import WorkflowDispatcher, WorkflowRegistry, WorkflowRunner
from content_workflows.services import ResolutionStatus, TaxonomyResolver


@pytest.fixture
def runner(registry):
    for step in (
        UppercaseTitleStep(),
        RequiresExcerptStep(),
        RequiresServiceStep(),
        AppendMarkerStep("step_one"),
        AppendMarkerStep("step_three"),
        FailingStep(),
    ):
        registry.register_step(step)
    return WorkflowRunner(registry)


class TestExampleScenarios:
    """The reference scenarios for the engine."""

    def test_uppercase_title_on_payload(self, runner):
        result = runner.run_virtual({"post": {"title": "hello"}}, {"steps": [{"id": "uppercase_title"}]})

        assert result["payload"]["post"]["title"] == "HELLO"
        assert result["execution"]["stats"] == {"executed": 1, "skipped": 0, "errors": 0}

    def test_missing_excerpt_is_skipped(self, runner):
        result = runner.run_virtual({"post": {"title": "hello"}}, {"steps": [{"id": "needs_excerpt"}]})

        stats = result["execution"]["stats"]
        assert stats == {"executed": 0, "skipped": 1, "errors": 0}
        assert "post.excerpt" in result["execution"]["skipped"][0]["reason"]

    def test_resolver_without_backend_passes_terms_through(self):
        term = {"slug": "news"}

        resolution = TaxonomyResolver().resolve("category", term, "en", "de")

        assert resolution.status is ResolutionStatus.PASSTHROUGH
        assert resolution.resolved == resolution.original

    def test_failed_commit_keeps_changes(self, record_store):
        record_store.fail_record_updates = True
        context = DatabaseWorkflowContext(record_store, 1, "en", "de", auto_commit=False)

        context.set("post.title", "X")

        assert context.commit() is False
        assert context.has_changes() is True

    @pytest.mark.parametrize(
        "continue_on_error,executed,errors",
        [(True, [0, 2], 1), (False, [0], 1)],
    )
    def test_error_policy(self, runner, continue_on_error, executed, errors):
        runner.registry.get_executor().set_continue_on_error(continue_on_error)
        workflow = {"steps": [{"id": "step_one"}, {"id": "failing"}, {"id": "step_three"}]}

        result = runner.run_virtual({}, workflow)

        assert [s["index"] for s in result["execution"]["executed"]] == executed
        assert result["execution"]["stats"]["errors"] == errors


class TestEngineProperties:
    """Behavioural guarantees across components."""

    @pytest.mark.parametrize("skip_incompatible", [True, False])
    def test_skip_vs_error(self, runner, skip_incompatible):
        runner.registry.get_executor().set_skip_incompatible(skip_incompatible)

        stats = runner.run_virtual({}, {"steps": [{"id": "needs_service"}]})["execution"]["stats"]

        if skip_incompatible:
            assert (stats["skipped"], stats["errors"]) == (1, 0)
        else:
            assert (stats["skipped"], stats["errors"]) == (0, 1)

    def test_registered_service_satisfies_step(self, runner):
        runner.registry.register_service("X", lambda: "from registry")

        result = runner.run_virtual({}, {"steps": [{"id": "needs_service"}]})

        assert result["payload"]["output"]["service"] == "from registry"

    def test_partial_metadata_commit(self, record_store):
        record_store.fail_metadata_keys = {"seo_description"}
        context = DatabaseWorkflowContext(record_store, 1, "en", "de")
        context.set("meta.seo_title", "Title")
        context.set("meta.seo_description", "Description")

        assert context.commit() is False
        assert context.get_pending_changes()["meta"] == {"seo_description": "Description"}

    def test_with_data_leaves_original(self):
        context = VirtualWorkflowContext.create({"post": {"title": "A", "tags": ["x"]}}, "en", "de")
        before = {path: context.get(path) for path in ("post.title", "post.tags", "post.tags.0")}

        context.with_data({"post": {"title": "B", "tags": ["y", "z"]}})

        assert {path: context.get(path) for path in before} == before


class TestRecordWorkflows:
    """Workflows that run on stored records."""

    def test_taxonomy_and_outputs_on_record(self, runner, record_store):
        workflow = {
            "steps": [
                {"id": "resolve_taxonomy"},
                {"id": "apply_outputs", "actions": [{"type": "update_post_meta", "target": "category_status", "source": "taxonomy.categories.0.status"}]},
            ]
        }

        result = runner.run_on_post(1, workflow, {"source_language": "en", "target_language": "de"})

        assert result["success"] is True
        assert result["committed"] is True
        assert record_store.get_metadata(1)["category_status"] == "matched"

    def test_step_log_entries_reach_host_sink(self, runner, log_sink):
        runner.run_on_post(1, {"steps": [{"id": "resolve_taxonomy"}]}, {"source_language": "en", "target_language": "de"})

        entries = log_sink.get_entries()
        assert entries[0]["context"] == {"step": "resolve_taxonomy", "post_id": 1}
        assert "Resolved 1/1 terms for category" in entries[0]["message"]

    def test_legacy_step_from_host(self, record_store, languages, terms):
        host = HostRuntime(
            records=record_store,
            languages=languages,
            terms=terms,
            legacy_steps=[LegacyStepSpec("mocks.workflow_steps.SummaryLegacyStep")],
        )
        runner = WorkflowRunner(WorkflowRegistry(host=host, config=WorkflowConfig()))
        workflow = {
            "steps": [
                {"id": "legacy_summary", "max_words": 1},
                {"id": "apply_outputs", "actions": [{"type": "update_post_excerpt"}]},
            ]
        }

        result = runner.run_on_post(1, workflow)

        assert result["execution"]["stats"]["executed"] == 2
        assert record_store.get_record(1)["summary"] == "First"

    def test_legacy_step_on_payload(self):
        registry = WorkflowRegistry(config=WorkflowConfig())
        registry.register_legacy_step(SummaryLegacyStep())

        result = WorkflowRunner(registry).run_virtual(
            {"post": {"content": "alpha beta gamma delta"}},
            {"steps": [{"id": "legacy_summary"}]},
        )

        assert result["changes"]["output"]["ai_response"] == "alpha beta gamma"


class TestDispatcherFlow:
    """Stored workflows triggered for a translation."""

    def test_payload_then_record(self, host, record_store):
        host.workflows.save_workflow(
            {"id": "titles", "name": "Titles", "language": "de", "steps": [{"id": "uppercase_title"}]}
        )
        registry = WorkflowRegistry(host=host, config=WorkflowConfig(enable_virtual_workflows=True))
        registry.register_step(UppercaseTitleStep())
        dispatcher = WorkflowDispatcher(WorkflowRunner(registry))

        payload = dispatcher.process_payload({"post": {"title": "Neu"}}, "en", "de")
        summary = dispatcher.execute_on_post(2, "de")

        assert payload["post"]["title"] == "NEU"
        assert summary["success"] is True
        assert record_store.get_record(2)["title"] == "HALLO WELT"
