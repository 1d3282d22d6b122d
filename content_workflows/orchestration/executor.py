"""
Sequential workflow executor.

Runs the step configs of a workflow in order against one context. Per step:
resolve the step, check eligibility, validate its config, execute. Step
failures never escape; they are recorded in the returned WorkflowResult.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional

from ..context.base import WorkflowContext
from ..steps.base import WorkflowStep
from .definitions import WorkflowLike, step_identifier, workflow_label, workflow_steps
from .result import WorkflowResult

logger = logging.getLogger(__name__)

CANCELLED_REASON = "Workflow cancelled"


class WorkflowExecutor:
    """Executes workflows against contexts using its registered steps."""

    def __init__(self, continue_on_error: bool = True, skip_incompatible: bool = True):
        """Initialize executor.

        Args:
            continue_on_error: Keep going after a step error
            skip_incompatible: Record ineligible steps as skipped instead of failed
        """
        self.continue_on_error = continue_on_error
        self.skip_incompatible = skip_incompatible

        self._steps: Dict[str, WorkflowStep] = {}
        self._lock = threading.Lock()

        self._metrics = {
            "workflows_executed": 0,
            "workflows_failed": 0,
            "workflows_cancelled": 0,
            "steps_executed": 0,
            "steps_skipped": 0,
            "steps_failed": 0,
            "total_duration": 0.0,
        }

    # ========== Step Registration ==========

    def register_step(self, step: WorkflowStep) -> None:
        """Register a step under its id, replacing any previous one."""
        with self._lock:
            self._steps[step.get_id()] = step
        logger.debug(f"Registered step: {step.get_id()}")

    def get_step(self, step_id: str) -> Optional[WorkflowStep]:
        with self._lock:
            return self._steps.get(step_id)

    def get_steps(self) -> Dict[str, WorkflowStep]:
        with self._lock:
            return dict(self._steps)

    def get_external_compatible_steps(self) -> Dict[str, WorkflowStep]:
        return {
            step_id: step
            for step_id, step in self.get_steps().items()
            if step.is_external_compatible()
        }

    def set_continue_on_error(self, value: bool) -> None:
        self.continue_on_error = value

    def set_skip_incompatible(self, value: bool) -> None:
        self.skip_incompatible = value

    # ========== Execution ==========

    def execute(
        self,
        context: WorkflowContext,
        workflow: WorkflowLike,
        cancel_event: Optional[threading.Event] = None,
    ) -> WorkflowResult:
        """Run a workflow.

        Args:
            context: Context the steps operate on
            workflow: Definition model or mapping with a ``steps`` list
            cancel_event: When set, remaining steps are skipped

        Returns:
            Result with executed, skipped and failed steps
        """
        result = WorkflowResult()
        steps_config = workflow_steps(workflow)
        label = workflow_label(workflow)

        logger.info(f"Executing workflow '{label}' with {len(steps_config)} steps on {context!r}")

        for index, step_config in enumerate(steps_config):
            if cancel_event is not None and cancel_event.is_set():
                self._skip_remaining(result, steps_config, index)
                logger.warning(f"Workflow '{label}' cancelled before step {index}")
                break

            if not self._run_step(context, index, step_config, result) and not self.continue_on_error:
                logger.warning(f"Stopping workflow '{label}' after error in step {index}")
                break

        result.finish()
        self._record_metrics(result)

        logger.info(f"Workflow '{label}' finished: {result.summary()}")
        return result

    def _run_step(
        self,
        context: WorkflowContext,
        index: int,
        step_config: Dict[str, Any],
        result: WorkflowResult,
    ) -> bool:
        """Process one step config. Returns False if an error was recorded."""
        step_id = step_identifier(step_config)
        if not step_id:
            result.add_error(index, "unknown", "Step configuration missing type/id")
            return False

        step = self.get_step(step_id)
        if step is None:
            result.add_error(index, step_id, f"Step '{step_id}' not registered")
            return False

        try:
            can_execute = getattr(step, "can_execute", None)
            if can_execute is not None:
                eligibility = can_execute(context)
                if not eligibility.can_execute:
                    if self.skip_incompatible:
                        logger.info(f"Skipping step {index} ({step_id}): {eligibility.reason}")
                        result.add_skipped(index, step_id, eligibility.reason)
                        return True
                    result.add_error(index, step_id, eligibility.reason or "Step cannot execute")
                    return False

            validation_errors = step.validate_config(step_config)
            if validation_errors:
                result.add_error(index, step_id, "; ".join(validation_errors))
                return False

            step.execute(context, step_config)
        except Exception as e:
            logger.error(f"Step {index} ({step_id}) failed: {e}")
            result.add_error(index, step_id, str(e) or type(e).__name__, e)
            return False

        result.add_executed(index, step_id)
        return True

    def _skip_remaining(
        self, result: WorkflowResult, steps_config: List[Dict[str, Any]], start: int
    ) -> None:
        for index in range(start, len(steps_config)):
            step_id = step_identifier(steps_config[index]) or "unknown"
            result.add_skipped(index, step_id, CANCELLED_REASON)
        with self._lock:
            self._metrics["workflows_cancelled"] += 1

    def _record_metrics(self, result: WorkflowResult) -> None:
        with self._lock:
            if result.is_success():
                self._metrics["workflows_executed"] += 1
            else:
                self._metrics["workflows_failed"] += 1
            self._metrics["steps_executed"] += result.executed_count
            self._metrics["steps_skipped"] += result.skipped_count
            self._metrics["steps_failed"] += result.error_count
            self._metrics["total_duration"] += result.duration or 0.0

    def get_metrics(self) -> Dict[str, Any]:
        """Get executor metrics.

        Returns:
            Metrics dictionary
        """
        with self._lock:
            return self._metrics.copy()

    # ========== Validation ==========

    def validate(
        self, workflow: WorkflowLike, context: Optional[WorkflowContext] = None
    ) -> List[str]:
        """Check a workflow without running it.

        Args:
            workflow: Workflow to check
            context: If virtual, steps that need a record are reported

        Returns:
            Error messages (empty when the workflow is valid)
        """
        steps_config = workflow_steps(workflow)
        if not steps_config:
            return ["Workflow has no steps defined"]

        errors = []
        for index, step_config in enumerate(steps_config):
            step_id = step_identifier(step_config)
            if not step_id:
                errors.append(f"Step {index}: Missing type/id")
                continue

            step = self.get_step(step_id)
            if step is None:
                errors.append(f"Step {index}: Unknown step type '{step_id}'")
                continue

            if context is not None and context.is_virtual() and not step.is_external_compatible():
                errors.append(
                    f"Step {index} ({step_id}): Not compatible with virtual/external context"
                )

            try:
                step_errors = step.validate_config(step_config)
            except Exception as e:
                step_errors = [f"Config validation raised {type(e).__name__}: {e}"]
            for error in step_errors:
                errors.append(f"Step {index} ({step_id}): {error}")

        return errors
