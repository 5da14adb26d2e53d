# agent/scheduler.py
from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, Optional, Set

from rapidworker.ui.console import get_console


class Scheduler:
    """
    Drives cycles of work.

    One-shot (no frequency): a single cycle, then return.

    Continuous: every ``frequency`` ms a new cycle is started as its own
    task, whether or not the previous one finished. Once ``max_time`` ms have
    passed since ``run()`` began, or ``stop()`` was called, no further
    cycles start; ``run()`` returns when the in-flight counter is back to 0.
    """

    def __init__(
        self,
        cycle: Callable[[], Awaitable[object]],
        frequency: Optional[int] = None,
        max_time: Optional[int] = None,
    ):
        self.cycle = cycle
        self.frequency = frequency
        self.max_time = max_time
        self.in_flight = 0
        self.cycles_started = 0
        self._started_at: Optional[float] = None
        self._stopping = asyncio.Event()
        self._drained = asyncio.Event()
        self._drained.set()
        self._tasks: Set[asyncio.Task] = set()

    def stop(self) -> None:
        """Stop starting new cycles. In-flight cycles still run to completion."""
        self._stopping.set()

    @property
    def stopping(self) -> bool:
        return self._stopping.is_set()

    def budget_exceeded(self) -> bool:
        if not self.max_time or self._started_at is None:
            return False
        return (time.monotonic() - self._started_at) * 1000.0 > self.max_time

    def _begin_cycle(self) -> int:
        self.in_flight += 1
        self.cycles_started += 1
        self._drained.clear()
        return self.cycles_started

    def _end_cycle(self) -> None:
        self.in_flight -= 1
        if self.in_flight <= 0:
            self._drained.set()

    async def _run_cycle(self, number: int) -> None:
        console = get_console()
        console.print_cycle_started(number)
        try:
            await self.cycle()
        except Exception as e:
            console.print_error("Cycle failed", f"Cycle {number} raised {type(e).__name__}")
            console.print_exception(e)
        finally:
            self._end_cycle()

    def _launch(self) -> asyncio.Task:
        number = self._begin_cycle()
        task = asyncio.create_task(self._run_cycle(number))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _sleep(self, seconds: float) -> bool:
        """Sleep unless stopped first. Returns True when stop() interrupted it."""
        try:
            await asyncio.wait_for(self._stopping.wait(), timeout=seconds)
            return True
        except asyncio.TimeoutError:
            return False

    async def run(self) -> int:
        """Run until done. Returns the number of cycles started."""
        console = get_console()
        self._started_at = time.monotonic()

        if not self.frequency:
            await self._launch()
            return self.cycles_started

        interval = self.frequency / 1000.0
        while not self.stopping:
            if await self._sleep(interval):
                break
            if self.budget_exceeded():
                console.print_info("Max polling time reached")
                break
            self._launch()

        await self._drained.wait()
        console.print_info(f"Worker finished after {self.cycles_started} cycle(s)")
        return self.cycles_started
