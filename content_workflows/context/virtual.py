"""In-memory workflow context for payload transformation.

Operates on a JSON-like payload without touching any persistent store. Used
to transform a translation payload before it has been saved anywhere.
"""
from __future__ import annotations

import copy
from typing import Any, Dict, Optional

from .base import WorkflowContext
from .paths import diff_documents, merge_replace


class VirtualWorkflowContext(WorkflowContext):
    """Context whose state lives only in memory."""

    def is_virtual(self) -> bool:
        return True

    def get_post_id(self) -> Optional[int]:
        return None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "VirtualWorkflowContext":
        """Create a context from a translation payload.

        Expected payload structure::

            {
                "post": {"title": "...", "content": "...", "excerpt": "..."},
                "meta": {"custom_field": "value"},
                "taxonomy": {"categories": [...], "tags": [...]},
                "source_language": "en",
                "target_language": "de"
            }

        ``source_lang`` / ``target_lang`` are accepted as aliases. The source
        language defaults to ``en`` and the target language to an empty string.

        Args:
            payload: Translation payload

        Returns:
            New virtual context
        """
        source = payload.get("source_language") or payload.get("source_lang") or "en"
        target = payload.get("target_language") or payload.get("target_lang") or ""
        return cls(payload, source, target)

    @classmethod
    def create(
        cls, data: Dict[str, Any], source_language: str, target_language: str
    ) -> "VirtualWorkflowContext":
        """Create a context with explicit languages."""
        return cls(data, source_language, target_language)

    def with_data(self, data: Dict[str, Any]) -> "VirtualWorkflowContext":
        """Return a copy of this context with data merged in.

        The original context is not modified. Registered services are
        carried over to the copy.

        Args:
            data: Partial document to merge recursively

        Returns:
            New context instance
        """
        merged = merge_replace(copy.deepcopy(self._data), copy.deepcopy(data))
        clone = type(self)(merged, self._source_language, self._target_language)

        for name, service in self._services.items():
            clone.register_service(name, service)

        return clone

    def get_changes(self, original_data: Dict[str, Any]) -> Dict[str, Any]:
        """Return only the sections that differ from original_data.

        Args:
            original_data: Document before the workflow ran

        Returns:
            Nested dict of changed keys
        """
        return copy.deepcopy(diff_documents(self._data, original_data))
