"""
Support for post-processing steps written against the older step interface.

Legacy steps work on a flat dict instead of a context and report success in
their return value. :class:`LegacyStepAdapter` runs them as ordinary
workflow steps.
"""

from __future__ import annotations

import importlib
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

from ..context.base import WorkflowContext
from ..exceptions import StepExecutionError
from .base import WorkflowStep

logger = logging.getLogger(__name__)

# Output key -> context path used when the step config has no output_mapping entry
DEFAULT_OUTPUT_PATHS = {
    "ai_response": "output.ai_response",
    "processed_content": "post.content",
    "suggestions": "output.suggestions",
    "score": "output.score",
    "feedback": "output.feedback",
    "reviewed_content": "post.content",
    "reviewed_title": "post.title",
}

_RESERVED_KEYS = ("post", "meta", "taxonomy", "source_language", "target_language")


class LegacyStep(ABC):
    """Older post-processing step shape."""

    @abstractmethod
    def get_type(self) -> str:
        pass

    @abstractmethod
    def get_name(self) -> str:
        pass

    @abstractmethod
    def get_description(self) -> str:
        pass

    @abstractmethod
    def execute(self, context: Dict[str, Any], config: Dict[str, Any]) -> Dict[str, Any]:
        """Run the step.

        Returns:
            ``{"success": bool, "data": {...}, "error": str}``
        """
        pass

    def validate_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Return ``{"valid": bool, "errors": [...]}``."""
        return {"valid": True, "errors": []}

    def get_output_variables(self) -> List[str]:
        return []

    def get_required_variables(self) -> List[str]:
        return []

    def get_config_schema(self) -> Dict[str, Any]:
        return {}


class LegacyStepAdapter(WorkflowStep):
    """Wraps a LegacyStep so it can be registered like a native step.

    The legacy interface cannot say whether the step works on a virtual
    context or which data it needs, so both are passed in here.
    """

    def __init__(
        self,
        legacy_step: LegacyStep,
        external_compatible: bool = True,
        required_paths: Sequence[str] = (),
    ):
        self._legacy_step = legacy_step
        self._external_compatible = external_compatible
        self._required_paths = list(required_paths)

    @property
    def legacy_step(self) -> LegacyStep:
        return self._legacy_step

    def get_id(self) -> str:
        return self._legacy_step.get_type()

    def get_name(self) -> str:
        return self._legacy_step.get_name()

    def get_description(self) -> str:
        return self._legacy_step.get_description()

    def is_external_compatible(self) -> bool:
        return self._external_compatible

    def get_required_paths(self) -> List[str]:
        return list(self._required_paths)

    def validate_config(self, config: Dict[str, Any]) -> List[str]:
        validation = self._legacy_step.validate_config(config) or {}
        if validation.get("valid", True):
            return []
        return list(validation.get("errors") or ["Configuration validation failed"])

    def execute(self, context: WorkflowContext, config: Dict[str, Any]) -> None:
        result = self._legacy_step.execute(self.flatten_context(context), config) or {}

        if not result.get("success"):
            raise StepExecutionError(
                result.get("error") or "Legacy step execution failed", step_id=self.get_id()
            )

        output = result.get("data")
        if isinstance(output, dict):
            self._apply_output(context, output, config)

    def flatten_context(self, context: WorkflowContext) -> Dict[str, Any]:
        """Build the flat dict legacy steps expect.

        Post fields go to the top level, metadata as ``meta_<key>``, plus the
        language pair, the taxonomy section, ``post_id`` for record-backed
        contexts and any other top-level document keys.
        """
        data = context.export()
        flat: Dict[str, Any] = {}

        if isinstance(data.get("post"), dict):
            flat.update(data["post"])

        if isinstance(data.get("meta"), dict):
            for key, value in data["meta"].items():
                flat[f"meta_{key}"] = value

        flat["source_language"] = context.get_source_language()
        flat["target_language"] = context.get_target_language()

        if "taxonomy" in data:
            flat["taxonomy"] = data["taxonomy"]

        post_id = context.get_post_id()
        if post_id is not None:
            flat["post_id"] = post_id

        for key, value in data.items():
            if key not in _RESERVED_KEYS:
                flat[key] = value

        return flat

    def _apply_output(
        self, context: WorkflowContext, output: Dict[str, Any], config: Dict[str, Any]
    ) -> None:
        mapping = config.get("output_mapping") or {}

        for key, value in output.items():
            if key.startswith("_"):
                continue
            target = mapping.get(key) or DEFAULT_OUTPUT_PATHS.get(key, f"output.{key}")
            context.set(target, value)

        step_outputs = context.get("_step_outputs")
        if not isinstance(step_outputs, dict):
            step_outputs = {}
        step_outputs[self.get_id()] = output
        context.set("_step_outputs", step_outputs)

    @classmethod
    def from_class(
        cls,
        spec: Any,
        external_compatible: bool = True,
        required_paths: Sequence[str] = (),
    ) -> Optional["LegacyStepAdapter"]:
        """Build an adapter from a LegacyStep instance, class or dotted path.

        Returns:
            Adapter, or None if the spec cannot be turned into a LegacyStep
        """
        target = spec
        if isinstance(spec, str):
            module_name, _, attr = spec.rpartition(".")
            if not module_name:
                return None
            try:
                target = getattr(importlib.import_module(module_name), attr)
            except (ImportError, AttributeError) as e:
                logger.warning(f"Cannot load legacy step {spec}: {e}")
                return None

        if isinstance(target, type):
            if not issubclass(target, LegacyStep):
                return None
            try:
                target = target()
            except TypeError as e:
                logger.warning(f"Cannot instantiate legacy step {target.__name__}: {e}")
                return None

        if not isinstance(target, LegacyStep):
            return None

        return cls(target, external_compatible, required_paths)
