"""Bundle of host application collaborators."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from .languages import LanguageRelations
from .records import RecordAccessor
from .terms import TermTranslations
from .workflows import WorkflowStore


@dataclass
class LegacyStepSpec:
    """A legacy step to register together with the metadata it cannot report.

    ``step`` is a LegacyStep instance, a LegacyStep subclass or a dotted
    import path to one.
    """

    step: Any
    external_compatible: bool = True
    required_paths: List[str] = field(default_factory=list)


@dataclass
class HostRuntime:
    """Collaborators supplied by the surrounding content application.

    The registry only registers host-dependent services and legacy steps
    when a HostRuntime is given.
    """

    records: Optional[RecordAccessor] = None
    languages: Optional[LanguageRelations] = None
    terms: Optional[TermTranslations] = None
    workflows: Optional[WorkflowStore] = None
    legacy_steps: List[LegacyStepSpec] = field(default_factory=list)
    log_sink: Any = None
    # Called with the registry once default registration is done
    hooks: List[Callable[[Any], None]] = field(default_factory=list)
