"""
Outcome model of one workflow execution.

Each step of a run ends up in exactly one of three lists: executed, skipped
or failed. A run is successful when nothing failed; skips do not count.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class ExecutedStep:
    """A step that ran to completion."""

    index: int
    step_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {"index": self.index, "step_id": self.step_id}


@dataclass
class SkippedStep:
    """A step that was not run because it was ineligible."""

    index: int
    step_id: str
    reason: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {"index": self.index, "step_id": self.step_id, "reason": self.reason}


@dataclass
class FailedStep:
    """A step that failed configuration, validation or execution."""

    index: int
    step_id: str
    message: str
    exception: Optional[BaseException] = None

    @property
    def cause(self) -> Optional[str]:
        """Class name of the captured exception, if any."""
        return type(self.exception).__name__ if self.exception is not None else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "step_id": self.step_id,
            "message": self.message,
            "cause": self.cause,
        }


@dataclass
class WorkflowResult:
    """Result accumulated by the executor during one run."""

    executed: List[ExecutedStep] = field(default_factory=list)
    skipped: List[SkippedStep] = field(default_factory=list)
    errors: List[FailedStep] = field(default_factory=list)
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None

    def add_executed(self, index: int, step_id: str) -> None:
        self.executed.append(ExecutedStep(index, step_id))

    def add_skipped(self, index: int, step_id: str, reason: Optional[str]) -> None:
        self.skipped.append(SkippedStep(index, step_id, reason))

    def add_error(
        self,
        index: int,
        step_id: str,
        message: str,
        exception: Optional[BaseException] = None,
    ) -> None:
        self.errors.append(FailedStep(index, step_id, message, exception))

    def finish(self) -> None:
        """Mark the run as complete."""
        self.end_time = datetime.now()

    @property
    def duration(self) -> Optional[float]:
        if self.end_time is None:
            return None
        return (self.end_time - self.start_time).total_seconds()

    def is_success(self) -> bool:
        return not self.errors

    def has_skipped(self) -> bool:
        return bool(self.skipped)

    @property
    def executed_count(self) -> int:
        return len(self.executed)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def total_steps(self) -> int:
        return self.executed_count + self.skipped_count + self.error_count

    def summary(self) -> str:
        """Human readable outcome, e.g. "2 of 3 steps completed, 1 skipped, 0 failed"."""
        return (
            f"{self.executed_count} of {self.total_steps} steps completed, "
            f"{self.skipped_count} skipped, {self.error_count} failed"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Machine readable execution report."""
        return {
            "success": self.is_success(),
            "executed": [step.to_dict() for step in self.executed],
            "skipped": [step.to_dict() for step in self.skipped],
            "errors": [step.to_dict() for step in self.errors],
            "stats": {
                "executed": self.executed_count,
                "skipped": self.skipped_count,
                "errors": self.error_count,
            },
        }
