"""
Runs the stored workflows that apply to a translation.

The dispatcher is the integration point for the host's translation pipeline:
it picks the enabled workflows for a target language from a WorkflowStore
and runs them on a payload (before it is saved) or on a saved record.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from ..collaborators.workflows import WorkflowStore
from ..config import WorkflowConfig
from .runner import WorkflowRunner

logger = logging.getLogger(__name__)


def _label(workflow: Dict[str, Any]) -> str:
    return str(workflow.get("name") or workflow.get("id") or "unknown")


class WorkflowDispatcher:
    """Selects and runs stored workflows for a target language."""

    def __init__(
        self,
        runner: Optional[WorkflowRunner] = None,
        workflows: Optional[WorkflowStore] = None,
        config: Optional[WorkflowConfig] = None,
    ):
        self.runner = runner or WorkflowRunner()
        host = self.runner.registry.host
        self.workflows = workflows if workflows is not None else (host.workflows if host else None)
        self.config = config or self.runner.config
        self.enabled = True

    # ========== Workflow Selection ==========

    def get_workflows(
        self, target_language: str, workflow_ids: Optional[Iterable[str]] = None
    ) -> List[Dict[str, Any]]:
        """Enabled workflows by explicit ids, or for a target language."""
        if self.workflows is None:
            logger.debug("No workflow store configured")
            return []

        if workflow_ids:
            workflows = self.workflows.get_workflows_by_ids(workflow_ids)
        else:
            workflows = self.workflows.get_workflows_for_language(target_language)
        return [w for w in workflows if w.get("enabled", True)]

    def filter_virtual_compatible(self, workflows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Keep the enabled workflows whose steps can all run on a payload."""
        compatible = []
        for workflow in workflows:
            if not workflow.get("enabled", True):
                continue
            check = self.runner.check_virtual_compatibility(workflow)
            if check["compatible"]:
                compatible.append(workflow)
            else:
                logger.debug(
                    f"Workflow '{_label(workflow)}' not virtual-compatible: "
                    f"{[s['id'] for s in check['incompatible_steps']]}"
                )
        return compatible

    # ========== Execution ==========

    def process_payload(
        self, payload: Dict[str, Any], source_language: str, target_language: str
    ) -> Dict[str, Any]:
        """Run virtual workflows on a payload about to be sent for saving.

        Does nothing unless virtual workflows are enabled in the config and
        on this dispatcher. Each successful run's payload feeds the next.

        Returns:
            The (possibly) transformed payload
        """
        if not self.enabled or not self.config.enable_virtual_workflows:
            return payload

        workflows = self.get_workflows(target_language)
        if not workflows:
            return payload

        compatible = self.filter_virtual_compatible(workflows)
        if not compatible:
            logger.info(f"No virtual-compatible workflows for {target_language}")
            return payload

        for workflow in compatible:
            result = self.runner.run_virtual(payload, workflow)
            stats = result["execution"]["stats"]
            if result["success"]:
                payload = result["payload"]
                logger.info(
                    f"Virtual workflow '{_label(workflow)}' executed: "
                    f"{stats['executed']} executed, {stats['skipped']} skipped"
                )
            else:
                logger.warning(
                    f"Virtual workflow '{_label(workflow)}' failed with {stats['errors']} errors"
                )

        payload = dict(payload)
        payload["workflows_executed"] = True
        payload["workflows_executed_virtual"] = True
        return payload

    def execute_virtual(
        self,
        payload: Dict[str, Any],
        target_language: str,
        workflow_ids: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        """Run the matching virtual-compatible workflows on a payload.

        Returns:
            ``{success, payload, workflows_run, steps_executed, steps_skipped, errors}``
        """
        compatible = self.filter_virtual_compatible(self.get_workflows(target_language, workflow_ids))
        if not compatible:
            return {
                "success": True,
                "payload": payload,
                "workflows_run": 0,
                "steps_executed": 0,
                "steps_skipped": 0,
                "errors": [],
                "message": "No compatible workflows to run",
            }

        summary = self._new_summary(len(compatible))
        for workflow in compatible:
            result = self.runner.run_virtual(payload, workflow)
            if result["success"]:
                payload = result["payload"]
            self._accumulate(summary, workflow, result)

        summary["payload"] = payload
        summary["success"] = not summary["errors"]
        return summary

    def execute_on_post(
        self,
        post_id: int,
        target_language: str,
        workflow_ids: Optional[Iterable[str]] = None,
        auto_commit: Optional[bool] = None,
        source_language: str = "",
    ) -> Dict[str, Any]:
        """Run the matching workflows on a stored record, one after another.

        Returns:
            ``{success, workflows_run, steps_executed, steps_skipped, errors}``
        """
        workflows = self.get_workflows(target_language, workflow_ids)
        if not workflows:
            return {
                "success": True,
                "workflows_run": 0,
                "steps_executed": 0,
                "steps_skipped": 0,
                "errors": [],
                "message": "No workflows configured for this language",
            }

        options = {
            "auto_commit": auto_commit,
            "source_language": source_language,
            "target_language": target_language,
        }
        summary = self._new_summary(len(workflows))
        for workflow in workflows:
            result = self.runner.run_on_post(post_id, workflow, options)
            self._accumulate(summary, workflow, result)

        summary["success"] = not summary["errors"]
        return summary

    @staticmethod
    def _new_summary(workflows_run: int) -> Dict[str, Any]:
        return {
            "success": True,
            "workflows_run": workflows_run,
            "steps_executed": 0,
            "steps_skipped": 0,
            "errors": [],
        }

    @staticmethod
    def _accumulate(summary: Dict[str, Any], workflow: Dict[str, Any], result: Dict[str, Any]) -> None:
        execution = result.get("execution")
        if result["success"]:
            summary["steps_executed"] += execution["stats"]["executed"]
            summary["steps_skipped"] += execution["stats"]["skipped"]
            return

        entry = {"workflow": _label(workflow), "errors": execution["errors"] if execution else []}
        if result.get("error"):
            entry["error"] = result["error"]
        summary["errors"].append(entry)
