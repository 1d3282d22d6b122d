"""
Process-wide catalog of workflow steps and shared services.

The registry owns the executor (which holds the step registrations) and a
name -> service map that is injected into every context before execution.
Registration is expected to finish before concurrent use begins.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Optional, Sequence

from ..collaborators.host import HostRuntime
from ..config import WorkflowConfig, get_config
from ..services.log_sink import LogSink
from ..services.taxonomy import TaxonomyResolver
from ..steps.apply_outputs import ApplyOutputsStep
from ..steps.base import WorkflowStep
from ..steps.legacy import LegacyStepAdapter
from ..steps.resolve_taxonomy import ResolveTaxonomyStep
from .executor import WorkflowExecutor

logger = logging.getLogger(__name__)


class WorkflowRegistry:
    """Holds the executor, step registrations and named services.

    Use :meth:`get_instance` for the shared instance or construct one
    directly to pass it down explicitly.
    """

    _instance: Optional["WorkflowRegistry"] = None
    _instance_lock = threading.Lock()

    def __init__(
        self,
        host: Optional[HostRuntime] = None,
        config: Optional[WorkflowConfig] = None,
        executor: Optional[WorkflowExecutor] = None,
    ):
        """Initialize registry and register defaults.

        Args:
            host: Host collaborators; without one no host-dependent
                services or legacy steps are registered
            config: Engine configuration (defaults to the global config)
            executor: Executor to use (one is created from config if omitted)
        """
        self.host = host
        self.config = config or get_config()
        self._executor = executor or WorkflowExecutor(
            continue_on_error=self.config.continue_on_error,
            skip_incompatible=self.config.skip_incompatible,
        )
        self._services: Dict[str, Any] = {}
        self._legacy_step_meta: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

        self._register_default_services()
        self._register_default_steps()

    @classmethod
    def get_instance(
        cls, host: Optional[HostRuntime] = None, config: Optional[WorkflowConfig] = None
    ) -> "WorkflowRegistry":
        """Return the shared registry, creating it on first use.

        Arguments only take effect on the call that creates the instance.
        """
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls(host=host, config=config)
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the shared instance (useful for testing)."""
        with cls._instance_lock:
            cls._instance = None

    # ========== Steps ==========

    def get_executor(self) -> WorkflowExecutor:
        return self._executor

    def register_step(self, step: WorkflowStep) -> None:
        self._executor.register_step(step)

    def register_legacy_step(
        self,
        spec: Any,
        external_compatible: bool = True,
        required_paths: Sequence[str] = (),
    ) -> bool:
        """Wrap and register a legacy step.

        Args:
            spec: LegacyStep instance, class or dotted import path
            external_compatible: Whether the step works on virtual contexts
            required_paths: Data paths the step needs

        Returns:
            True if registered, False if the spec is unusable
        """
        adapter = LegacyStepAdapter.from_class(spec, external_compatible, required_paths)
        if adapter is None:
            logger.warning(f"Legacy step {spec!r} could not be registered")
            return False

        self._executor.register_step(adapter)
        with self._lock:
            self._legacy_step_meta[adapter.get_id()] = {
                "class": spec if isinstance(spec, str) else type(adapter.legacy_step).__name__,
                "external_compatible": external_compatible,
                "required_paths": list(required_paths),
            }
        return True

    def is_legacy_step(self, step_id: str) -> bool:
        with self._lock:
            return step_id in self._legacy_step_meta

    def get_steps_for_ui(self) -> Dict[str, Dict[str, Any]]:
        """Step catalog keyed by step id."""
        steps = {}
        for step_id, step in self._executor.get_steps().items():
            entry = step.describe()
            entry["is_legacy"] = self.is_legacy_step(step_id)
            steps[step_id] = entry
        return steps

    # ========== Services ==========

    def register_service(self, name: str, service: Any) -> None:
        with self._lock:
            self._services[name] = service

    def get_service(self, name: str) -> Any:
        with self._lock:
            return self._services.get(name)

    def has_service(self, name: str) -> bool:
        with self._lock:
            return name in self._services

    def get_services(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._services)

    def inject_services(self, context: Any) -> None:
        """Register every service on the context; no-op for contexts without services."""
        if not hasattr(context, "register_service"):
            return
        for name, service in self.get_services().items():
            context.register_service(name, service)

    # ========== Defaults ==========

    def _register_default_services(self) -> None:
        terms = self.host.terms if self.host is not None else None
        self.register_service("TaxonomyResolver", TaxonomyResolver(terms))

        if self.host is not None:
            self.register_service("Logger", self.host.log_sink or LogSink())

    def _register_default_steps(self) -> None:
        self.register_step(ResolveTaxonomyStep())
        self.register_step(ApplyOutputsStep())

        if self.host is None:
            return

        for legacy in self.host.legacy_steps:
            self.register_legacy_step(
                legacy.step, legacy.external_compatible, legacy.required_paths
            )

        for hook in self.host.hooks:
            hook(self)

    def __repr__(self) -> str:
        return (
            f"WorkflowRegistry(steps={sorted(self._executor.get_steps())}, "
            f"services={sorted(self.get_services())})"
        )
