"""
Workflow step contract.

A step is one named transformation of a workflow context. It declares the
services and data paths it needs so that the executor can decide whether it
is eligible before running it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..context.base import WorkflowContext
from ..services.log_sink import LEVELS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Eligibility:
    """Answer of :meth:`WorkflowStep.can_execute`."""

    can_execute: bool
    reason: Optional[str] = None

    @classmethod
    def ok(cls) -> "Eligibility":
        return cls(True)

    @classmethod
    def blocked(cls, reason: str) -> "Eligibility":
        return cls(False, reason)

    def __bool__(self) -> bool:
        return self.can_execute

    def to_dict(self) -> Dict[str, Any]:
        return {"can_execute": self.can_execute, "reason": self.reason}


class WorkflowStep(ABC):
    """Base class for workflow steps.

    Subclasses must provide ``get_id``, ``get_name``, ``get_description`` and
    ``execute``. The prerequisites default to none, external compatibility
    to True and config validation to "no errors".
    """

    @abstractmethod
    def get_id(self) -> str:
        """Unique step identifier used in workflow definitions."""
        pass

    @abstractmethod
    def get_name(self) -> str:
        pass

    @abstractmethod
    def get_description(self) -> str:
        pass

    def get_required_services(self) -> List[str]:
        """Names of context services the step needs."""
        return []

    def get_required_paths(self) -> List[str]:
        """Dot paths that must exist in the context document."""
        return []

    def is_external_compatible(self) -> bool:
        """Return False if the step needs a persisted record to work on."""
        return True

    def can_execute(self, context: WorkflowContext) -> Eligibility:
        """Check context kind, required services and required paths in that order.

        Args:
            context: Context the step would run on

        Returns:
            Eligibility with the first reason found, if any
        """
        step_id = self.get_id()

        if context.is_virtual() and not self.is_external_compatible():
            return Eligibility.blocked(
                f'Step "{step_id}" is not compatible with virtual/external context'
            )

        for service in self.get_required_services():
            if not context.has_service(service):
                return Eligibility.blocked(
                    f'Step "{step_id}" requires service "{service}" which is not available'
                )

        for path in self.get_required_paths():
            if not context.has(path):
                return Eligibility.blocked(
                    f'Step "{step_id}" requires data at path "{path}" which is missing'
                )

        return Eligibility.ok()

    def validate_config(self, config: Dict[str, Any]) -> List[str]:
        """Return a list of configuration errors (empty when valid)."""
        return []

    @abstractmethod
    def execute(self, context: WorkflowContext, config: Dict[str, Any]) -> None:
        """Apply the step to the context.

        Raises:
            Exception: Any failure; the executor records it as a step error
        """
        pass

    def describe(self) -> Dict[str, Any]:
        """Catalog entry for this step."""
        return {
            "id": self.get_id(),
            "name": self.get_name(),
            "description": self.get_description(),
            "external_compatible": self.is_external_compatible(),
            "required_services": list(self.get_required_services()),
            "required_paths": list(self.get_required_paths()),
        }

    def log(self, context: WorkflowContext, message: str, level: str = "info") -> None:
        """Send a message to the context's Logger service, or the module logger without one."""
        step_id = self.get_id()
        text = f"[{step_id}] {message}"

        sink = context.get_service("Logger")
        if sink is not None and hasattr(sink, "log"):
            sink.log(text, level, {"step": step_id, "post_id": context.get_post_id()})
        else:
            logger.log(LEVELS.get(level, logging.INFO), text)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.get_id()!r})"
