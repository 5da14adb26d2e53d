"""Common contract for every action."""
from __future__ import annotations

import time
from typing import Any, Dict, Optional

from rapidworker.context import Context
from rapidworker.model import ActionOutcome, ActionReport


def elapsed_ms(started: float) -> float:
    """Milliseconds since ``started`` (a ``time.perf_counter()`` reading)."""
    return max(0.0, (time.perf_counter() - started) * 1000.0)


class BaseAction:
    """
    A single unit of executable work.

    Subclasses implement ``_evaluate``. Callers only use ``evaluate``, which
    never raises: anything escaping ``_evaluate`` becomes a failure report.
    """

    name: str = "Action"

    def __init__(self, parameters: Optional[Dict[str, Any]] = None):
        self.parameters: Dict[str, Any] = dict(parameters or {})

    async def evaluate(self, context: Context) -> ActionOutcome:
        started = time.perf_counter()
        try:
            outcome = await self._evaluate(context, started)
        except Exception as e:
            return self.fail(f"{type(e).__name__}: {e}", started, long_summary=repr(e))
        if not outcome.action_reports:
            return self.fail("Action produced no report", started)
        return outcome

    async def _evaluate(self, context: Context, started: float) -> ActionOutcome:
        raise NotImplementedError

    # ---- report helpers ----

    def report(
        self,
        success: bool,
        short_summary: str,
        started: float,
        long_summary: str | None = None,
    ) -> ActionReport:
        return ActionReport(
            action=self.name,
            success=success,
            short_summary=short_summary,
            long_summary=long_summary,
            time=elapsed_ms(started),
        )

    def fail(
        self,
        short_summary: str,
        started: float,
        long_summary: str | None = None,
        response: Optional[Dict[str, Any]] = None,
    ) -> ActionOutcome:
        return ActionOutcome(
            action_reports=[self.report(False, short_summary, started, long_summary)],
            response=response,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"
