"""Workflow definition sources."""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)


def _workflow_language(workflow: Dict[str, Any]) -> str:
    return workflow.get("language") or workflow.get("target_language") or ""


class WorkflowStore(ABC):
    """Abstract source of workflow definitions.

    Definitions are plain dicts ``{id, name, enabled, language, steps}``.
    """

    @abstractmethod
    def get_all_workflows(self) -> List[Dict[str, Any]]:
        """Return every stored workflow ordered by name."""
        pass

    @abstractmethod
    def get_workflow(self, workflow_id: str) -> Optional[Dict[str, Any]]:
        """Return one workflow, or None if unknown."""
        pass

    def get_workflows_for_language(self, language: str) -> List[Dict[str, Any]]:
        """Return workflows for language plus those with no language (all languages).

        Args:
            language: Target language code

        Returns:
            Matching workflows ordered by name
        """
        return [
            workflow
            for workflow in self.get_all_workflows()
            if _workflow_language(workflow) in ("", language)
        ]

    def get_workflows_by_ids(self, workflow_ids: Iterable[str]) -> List[Dict[str, Any]]:
        """Return the known workflows among workflow_ids, in the order given."""
        workflows = []
        for workflow_id in workflow_ids:
            workflow = self.get_workflow(workflow_id)
            if workflow is not None:
                workflows.append(workflow)
        return workflows


class InMemoryWorkflowStore(WorkflowStore):
    """In-memory workflow store."""

    def __init__(self, workflows: Optional[Iterable[Dict[str, Any]]] = None):
        self._workflows: Dict[str, Dict[str, Any]] = {}
        self._lock = Lock()
        for workflow in workflows or []:
            self.save_workflow(workflow)

    def save_workflow(self, workflow: Dict[str, Any]) -> str:
        """Store a workflow, replacing any with the same id.

        Returns:
            Workflow ID

        Raises:
            ValueError: If the workflow has no id
        """
        workflow_id = workflow.get("id")
        if not workflow_id:
            raise ValueError("Workflow must have an 'id'")
        with self._lock:
            self._workflows[str(workflow_id)] = dict(workflow)
        return str(workflow_id)

    def delete_workflow(self, workflow_id: str) -> bool:
        with self._lock:
            return self._workflows.pop(workflow_id, None) is not None

    def get_all_workflows(self) -> List[Dict[str, Any]]:
        with self._lock:
            return sorted(
                (dict(w) for w in self._workflows.values()),
                key=lambda w: str(w.get("name", "")),
            )

    def get_workflow(self, workflow_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            workflow = self._workflows.get(workflow_id)
            return dict(workflow) if workflow is not None else None


class JsonFileWorkflowStore(InMemoryWorkflowStore):
    """Workflow store backed by a JSON file holding a list of definitions.

    The file may also be an object with a ``workflows`` list.
    """

    def __init__(self, path: Path):
        super().__init__()
        self.path = Path(path)
        self.reload()

    def reload(self) -> int:
        """Re-read the file.

        Returns:
            Number of workflows loaded

        Raises:
            ValueError: If the file does not hold a list of workflows
        """
        with open(self.path, encoding="utf-8") as f:
            raw = json.load(f)

        workflows = raw.get("workflows") if isinstance(raw, dict) else raw
        if not isinstance(workflows, list):
            raise ValueError(f"{self.path} does not contain a list of workflows")

        with self._lock:
            self._workflows.clear()
        for workflow in workflows:
            self.save_workflow(workflow)

        logger.info(f"Loaded {len(workflows)} workflows from {self.path}")
        return len(workflows)
