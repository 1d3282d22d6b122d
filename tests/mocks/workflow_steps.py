"""Small workflow steps used to drive the executor in tests.

Each step does one observable thing to the context so that ordering,
skipping and failure handling can be asserted on the resulting document.
"""
from __future__ import annotations

from typing import Any, Dict, List

from content_workflows.steps.base import WorkflowStep
from content_workflows.steps.legacy import LegacyStep


class UppercaseTitleStep(WorkflowStep):
    """Uppercases post.title."""

    def get_id(self) -> str:
        return "uppercase_title"

    def get_name(self) -> str:
        return "Uppercase Title"

    def get_description(self) -> str:
        return "Uppercases the post title"

    def execute(self, context, config: Dict[str, Any]) -> None:
        context.set("post.title", str(context.get("post.title") or "").upper())


class AppendMarkerStep(WorkflowStep):
    """Appends config['marker'] to the list at trace."""

    def __init__(self, step_id: str = "append_marker"):
        self._step_id = step_id

    def get_id(self) -> str:
        return self._step_id

    def get_name(self) -> str:
        return "Append Marker"

    def get_description(self) -> str:
        return "Records that the step ran"

    def execute(self, context, config: Dict[str, Any]) -> None:
        trace = context.get("trace") or []
        trace.append(config.get("marker", self._step_id))
        context.set("trace", trace)


class CopyTitleToExcerptStep(WorkflowStep):
    """Copies post.title into post.excerpt; depends on a previous step's write."""

    def get_id(self) -> str:
        return "copy_title_to_excerpt"

    def get_name(self) -> str:
        return "Copy Title"

    def get_description(self) -> str:
        return "Copies the title into the excerpt"

    def get_required_paths(self) -> List[str]:
        return ["post.title"]

    def execute(self, context, config: Dict[str, Any]) -> None:
        context.set("post.excerpt", context.get("post.title"))


class FailingStep(WorkflowStep):
    """Always raises."""

    def __init__(self, message: str = "upstream call failed", exc_type=RuntimeError):
        self._message = message
        self._exc_type = exc_type

    def get_id(self) -> str:
        return "failing"

    def get_name(self) -> str:
        return "Failing"

    def get_description(self) -> str:
        return "Raises on execute"

    def execute(self, context, config: Dict[str, Any]) -> None:
        raise self._exc_type(self._message)


class RaisingEligibilityStep(WorkflowStep):
    """Eligibility check that raises instead of answering."""

    def get_id(self) -> str:
        return "raising_eligibility"

    def get_name(self) -> str:
        return "Raising Eligibility"

    def get_description(self) -> str:
        return "Looks up eligibility from a backend that is down"

    def can_execute(self, context):
        raise RuntimeError("eligibility lookup failed")

    def execute(self, context, config: Dict[str, Any]) -> None:
        context.set("output.eligible", True)


class RaisingConfigStep(WorkflowStep):
    """Config validation that indexes a key without checking for it."""

    def get_id(self) -> str:
        return "raising_config"

    def get_name(self) -> str:
        return "Raising Config"

    def get_description(self) -> str:
        return "Reads config['required'] during validation"

    def validate_config(self, config: Dict[str, Any]) -> List[str]:
        return [] if config["required"] else ["required must be truthy"]

    def execute(self, context, config: Dict[str, Any]) -> None:
        context.set("output.required", config["required"])


class RequiresExcerptStep(WorkflowStep):
    """Needs post.excerpt to be present."""

    def get_id(self) -> str:
        return "needs_excerpt"

    def get_name(self) -> str:
        return "Needs Excerpt"

    def get_description(self) -> str:
        return "Summarises the excerpt"

    def get_required_paths(self) -> List[str]:
        return ["post.excerpt"]

    def execute(self, context, config: Dict[str, Any]) -> None:
        context.set("output.summary", str(context.get("post.excerpt"))[:20])


class RequiresServiceStep(WorkflowStep):
    """Needs a service named X."""

    def get_id(self) -> str:
        return "needs_service"

    def get_name(self) -> str:
        return "Needs Service"

    def get_description(self) -> str:
        return "Calls service X"

    def get_required_services(self) -> List[str]:
        return ["X"]

    def execute(self, context, config: Dict[str, Any]) -> None:
        context.set("output.service", context.get_service("X")())


class RecordOnlyStep(WorkflowStep):
    """Can only run against a stored record."""

    def get_id(self) -> str:
        return "record_only"

    def get_name(self) -> str:
        return "Record Only"

    def get_description(self) -> str:
        return "Touches the record store directly"

    def is_external_compatible(self) -> bool:
        return False

    def execute(self, context, config: Dict[str, Any]) -> None:
        context.set("meta.touched", "yes")


class StrictConfigStep(WorkflowStep):
    """Rejects configs without a 'value' key."""

    def get_id(self) -> str:
        return "strict_config"

    def get_name(self) -> str:
        return "Strict Config"

    def get_description(self) -> str:
        return "Writes config['value'] to output.value"

    def validate_config(self, config: Dict[str, Any]) -> List[str]:
        if "value" not in config:
            return ["value is required"]
        return []

    def execute(self, context, config: Dict[str, Any]) -> None:
        context.set("output.value", config["value"])


class SummaryLegacyStep(LegacyStep):
    """Legacy step producing an ai_response and a custom output."""

    def __init__(self):
        self.received: List[Dict[str, Any]] = []

    def get_type(self) -> str:
        return "legacy_summary"

    def get_name(self) -> str:
        return "Legacy Summary"

    def get_description(self) -> str:
        return "Summarises the content"

    def validate_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        if config.get("max_words") is not None and not isinstance(config["max_words"], int):
            return {"valid": False, "errors": ["max_words must be an integer"]}
        return {"valid": True, "errors": []}

    def execute(self, context: Dict[str, Any], config: Dict[str, Any]) -> Dict[str, Any]:
        self.received.append(context)
        words = str(context.get("content", "")).split()
        limit = config.get("max_words") or 3
        return {
            "success": True,
            "data": {
                "ai_response": " ".join(words[:limit]),
                "word_count": len(words),
                "_debug": "internal",
            },
        }


class BrokenLegacyStep(LegacyStep):
    """Legacy step reporting failure in its result."""

    def get_type(self) -> str:
        return "legacy_broken"

    def get_name(self) -> str:
        return "Legacy Broken"

    def get_description(self) -> str:
        return "Always reports failure"

    def execute(self, context: Dict[str, Any], config: Dict[str, Any]) -> Dict[str, Any]:
        return {"success": False, "error": "Model quota exceeded"}
