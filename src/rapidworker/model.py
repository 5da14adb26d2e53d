# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Response fields forwarded to the coordinator
REPORTED_RESPONSE_FIELDS = ("data", "headers", "status")


@dataclass(frozen=True)
class ActionStep:
    """A single action inside a test: registry name + raw parameters."""
    action: str
    parameters: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ActionReport:
    """Outcome line for one evaluated action. ``time`` is in milliseconds."""
    action: str
    success: bool
    short_summary: str
    long_summary: str | None = None
    time: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action,
            "success": self.success,
            "shortSummary": self.short_summary,
            "longSummary": self.long_summary,
            "time": self.time,
        }


@dataclass
class ActionOutcome:
    """
    Result of evaluating one action.

    Always carries at least one report; ``response`` is only set by actions
    that talk to something returning a payload (HTTP, databases).
    """
    action_reports: List[ActionReport]
    response: Optional[Dict[str, Any]] = None

    @property
    def success(self) -> bool:
        return all(r.success for r in self.action_reports)

    @property
    def time(self) -> Optional[float]:
        """Elapsed time of the first report."""
        if not self.action_reports:
            return None
        return self.action_reports[0].time


@dataclass
class ExecutionResult:
    """Value reported back to the coordinator for one request job."""
    response: Optional[Dict[str, Any]]
    execution_time: Optional[float]

    @classmethod
    def from_outcome(cls, outcome: ActionOutcome) -> ExecutionResult:
        return cls(
            response=project_response(outcome.response),
            execution_time=outcome.time,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "response": self.response,
            "executionTime": self.execution_time,
        }


def project_response(response: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Keep only the response fields the coordinator stores."""
    if not response:
        return {}
    return {k: response[k] for k in REPORTED_RESPONSE_FIELDS if k in response}
