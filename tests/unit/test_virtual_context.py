"""Tests for content_workflows.context.virtual module."""

from content_workflows.context.virtual import VirtualWorkflowContext


def _payload():
    return {
        "post": {"title": "Hello", "content": "Body"},
        "meta": {"seo_title": "Hi"},
        "taxonomy": {"categories": [{"slug": "news"}], "tags": []},
        "source_language": "en",
        "target_language": "de",
    }


class TestFromPayload:
    """Tests for VirtualWorkflowContext.from_payload()."""

    def test_languages_read_from_payload(self):
        context = VirtualWorkflowContext.from_payload(_payload())

        assert context.get_source_language() == "en"
        assert context.get_target_language() == "de"
        assert context.is_virtual() is True
        assert context.get_post_id() is None

    def test_language_aliases(self):
        context = VirtualWorkflowContext.from_payload({"source_lang": "fr", "target_lang": "it"})

        assert context.get_source_language() == "fr"
        assert context.get_target_language() == "it"

    def test_language_defaults(self):
        context = VirtualWorkflowContext.from_payload({"post": {"title": "x"}})

        assert context.get_source_language() == "en"
        assert context.get_target_language() == ""

    def test_payload_is_copied(self):
        payload = _payload()
        context = VirtualWorkflowContext.from_payload(payload)

        context.set("post.title", "Changed")
        payload["meta"]["seo_title"] = "Mutated outside"

        assert payload["post"]["title"] == "Hello"
        assert context.get("meta.seo_title") == "Hi"

    def test_whole_payload_is_document(self):
        context = VirtualWorkflowContext.from_payload(_payload())
        assert context.get("source_language") == "en"
        assert context.export()["post"] == {"title": "Hello", "content": "Body"}


class TestDataAccess:
    """Tests for path access inherited from WorkflowContext."""

    def test_missing_path_safety(self):
        context = VirtualWorkflowContext.create({}, "en", "de")

        for path in ("post", "post.title", "a.b.c", "taxonomy.categories.0"):
            assert context.get(path) is None
            assert context.has(path) is False

    def test_delete_is_idempotent(self):
        context = VirtualWorkflowContext.create({"post": {"title": "x"}}, "en", "de")

        context.delete("post.title")
        context.delete("post.title")
        context.delete("never.there")

        assert context.has("post.title") is False

    def test_export_is_snapshot(self):
        context = VirtualWorkflowContext.create({"post": {"title": "x"}}, "en", "de")
        snapshot = context.export()
        snapshot["post"]["title"] = "changed"
        assert context.get("post.title") == "x"

    def test_services(self):
        context = VirtualWorkflowContext.create({}, "en", "de")
        service = object()

        context.register_service("X", service)

        assert context.has_service("X")
        assert context.get_service("X") is service
        assert context.get_service("Y") is None
        assert context.get_services() == {"X": service}

    def test_repr(self):
        context = VirtualWorkflowContext.create({}, "en", "de")
        assert repr(context) == "VirtualWorkflowContext(post_id=None, source='en', target='de')"


class TestWithData:
    """Tests for VirtualWorkflowContext.with_data()."""

    def test_original_is_not_modified(self):
        context = VirtualWorkflowContext.from_payload(_payload())
        before = context.export()

        clone = context.with_data({"post": {"title": "New"}, "taxonomy": {"categories": [{"slug": "x"}]}})

        assert context.export() == before
        assert clone.get("post.title") == "New"
        assert clone.get("post.content") == "Body"
        assert clone.get("taxonomy.categories.0.slug") == "x"

    def test_clone_is_independent(self):
        context = VirtualWorkflowContext.from_payload(_payload())
        clone = context.with_data({})

        clone.set("meta.seo_title", "Other")

        assert context.get("meta.seo_title") == "Hi"

    def test_services_and_languages_carried_over(self):
        context = VirtualWorkflowContext.create({}, "en", "de")
        service = object()
        context.register_service("TaxonomyResolver", service)

        clone = context.with_data({"post": {"title": "x"}})

        assert clone.get_service("TaxonomyResolver") is service
        assert clone.get_source_language() == "en"
        assert clone.get_target_language() == "de"
        assert isinstance(clone, VirtualWorkflowContext)

    def test_merge_input_not_aliased(self):
        context = VirtualWorkflowContext.create({}, "en", "de")
        data = {"meta": {"items": [1, 2]}}

        clone = context.with_data(data)
        data["meta"]["items"].append(3)

        assert clone.get("meta.items") == [1, 2]


class TestGetChanges:
    """Tests for VirtualWorkflowContext.get_changes()."""

    def test_no_changes(self):
        payload = _payload()
        context = VirtualWorkflowContext.from_payload(payload)
        assert context.get_changes(payload) == {}

    def test_reports_changed_and_added_sections(self):
        payload = _payload()
        context = VirtualWorkflowContext.from_payload(payload)

        context.set("post.title", "HELLO")
        context.set("output.ai_response", "Summary")

        assert context.get_changes(payload) == {
            "post": {"title": "HELLO"},
            "output": {"ai_response": "Summary"},
        }

    def test_same_value_written_back_is_not_a_change(self):
        payload = _payload()
        context = VirtualWorkflowContext.from_payload(payload)

        context.set("post.title", "Hello")

        assert context.get_changes(payload) == {}

    def test_changed_list_element_reported_alone(self):
        payload = {"taxonomy": {"tags": [{"slug": "a"}, {"slug": "b"}]}}
        context = VirtualWorkflowContext.from_payload(payload)

        context.set("taxonomy.tags.1.slug", "c")

        assert context.get_changes(payload) == {"taxonomy": {"tags": {1: {"slug": "c"}}}}
