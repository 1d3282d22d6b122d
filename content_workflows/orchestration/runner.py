"""
High-level entry points for running workflows.

The runner builds the right context for a payload or a record, injects the
registry's services, runs the executor and, for records, commits the
buffered changes.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Mapping, Optional

from ..collaborators.records import RecordAccessor
from ..context.base import WorkflowContext
from ..context.database import DatabaseWorkflowContext
from ..context.virtual import VirtualWorkflowContext
from ..exceptions import ConfigurationError
from .definitions import RunOptions, WorkflowLike, step_identifier, workflow_steps
from .registry import WorkflowRegistry
from .result import WorkflowResult

logger = logging.getLogger(__name__)


class WorkflowRunner:
    """Facade over context construction, service injection and execution."""

    def __init__(self, registry: Optional[WorkflowRegistry] = None):
        self.registry = registry or WorkflowRegistry.get_instance()

    @property
    def config(self):
        return self.registry.config

    def run_virtual(
        self,
        payload: Dict[str, Any],
        workflow: WorkflowLike,
        cancel_event: Optional[threading.Event] = None,
    ) -> Dict[str, Any]:
        """Run a workflow on a payload without touching any store.

        Args:
            payload: Translation payload (see VirtualWorkflowContext.from_payload)
            workflow: Workflow definition
            cancel_event: Optional cancellation flag

        Returns:
            ``{success, payload, changes, execution}``
        """
        context = VirtualWorkflowContext.from_payload(payload)
        result = self.run(context, workflow, cancel_event)

        return {
            "success": result.is_success(),
            "payload": context.export(),
            "changes": context.get_changes(payload),
            "execution": result.to_dict(),
        }

    def run_on_post(
        self,
        post_id: int,
        workflow: WorkflowLike,
        options: Optional[Mapping[str, Any]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Dict[str, Any]:
        """Run a workflow on a stored record.

        Args:
            post_id: Record id
            workflow: Workflow definition
            options: ``auto_commit``, ``source_language``, ``target_language``
            cancel_event: Optional cancellation flag

        Returns:
            ``{success, committed, pending_changes, execution}``, or a failure
            result with ``error`` when the record does not exist

        Raises:
            ConfigurationError: If the host provides no record accessor
            pydantic.ValidationError: If options are malformed
        """
        opts = RunOptions.model_validate(dict(options or {}))
        records = self._get_records()

        context = self._build_record_context(records, post_id, opts)
        if context is None:
            logger.warning(f"Cannot run workflow: record {post_id} not found")
            return {
                "success": False,
                "error": f"Post {post_id} not found",
                "committed": False,
                "pending_changes": {},
                "execution": None,
            }

        result = self.run(context, workflow, cancel_event)

        auto_commit = self.config.auto_commit if opts.auto_commit is None else opts.auto_commit
        committed = False
        if result.is_success() and auto_commit and context.has_changes():
            committed = context.commit()

        return {
            "success": result.is_success(),
            "committed": committed,
            "pending_changes": context.get_pending_changes(),
            "execution": result.to_dict(),
        }

    def run(
        self,
        context: WorkflowContext,
        workflow: WorkflowLike,
        cancel_event: Optional[threading.Event] = None,
    ) -> WorkflowResult:
        """Run a workflow on an already constructed context."""
        self.registry.inject_services(context)
        return self.registry.get_executor().execute(context, workflow, cancel_event)

    def validate(self, workflow: WorkflowLike, for_virtual: bool = False) -> List[str]:
        """Pre-flight check of a workflow; see WorkflowExecutor.validate."""
        context = VirtualWorkflowContext.create({}, "en", "en") if for_virtual else None
        return self.registry.get_executor().validate(workflow, context)

    def get_available_steps(self, external_only: bool = False) -> Dict[str, Dict[str, Any]]:
        steps = self.registry.get_steps_for_ui()
        if external_only:
            steps = {k: v for k, v in steps.items() if v["external_compatible"]}
        return steps

    def check_virtual_compatibility(self, workflow: WorkflowLike) -> Dict[str, Any]:
        """Report registered steps of a workflow that cannot run on a payload.

        Unknown or unnamed steps are not reported here; validate() covers them.

        Returns:
            ``{compatible, incompatible_steps: [{index, id, name}]}``
        """
        executor = self.registry.get_executor()
        incompatible = []

        for index, step_config in enumerate(workflow_steps(workflow)):
            step_id = step_identifier(step_config)
            if not step_id:
                continue
            step = executor.get_step(step_id)
            if step is not None and not step.is_external_compatible():
                incompatible.append({"index": index, "id": step_id, "name": step.get_name()})

        return {"compatible": not incompatible, "incompatible_steps": incompatible}

    def _get_records(self) -> RecordAccessor:
        host = self.registry.host
        if host is None or host.records is None:
            raise ConfigurationError("No record accessor configured for record-backed workflows")
        return host.records

    def _build_record_context(
        self, records: RecordAccessor, post_id: int, opts: RunOptions
    ) -> Optional[DatabaseWorkflowContext]:
        if opts.has_explicit_languages():
            if records.get_record(post_id) is None:
                return None
            return DatabaseWorkflowContext(
                records, post_id, opts.source_language, opts.target_language
            )

        return DatabaseWorkflowContext.from_record(
            records,
            post_id,
            languages=self.registry.host.languages,
            default_source_language=self.config.default_source_language,
            source_language_meta_key=self.config.source_language_meta_key,
        )
