import asyncio

import pytest

from rapidworker.agent.scheduler import Scheduler


class Recorder:
    """Cycle stand-in that records starts, completions and overlap."""

    def __init__(self, duration: float = 0.0, fail_on: int | None = None):
        self.duration = duration
        self.fail_on = fail_on
        self.started = 0
        self.finished = 0
        self.running = 0
        self.peak = 0

    async def __call__(self):
        self.started += 1
        number = self.started
        self.running += 1
        self.peak = max(self.peak, self.running)
        try:
            await asyncio.sleep(self.duration)
            if number == self.fail_on:
                raise RuntimeError("cycle exploded")
        finally:
            self.running -= 1
            self.finished += 1


@pytest.mark.asyncio
async def test_one_shot_runs_exactly_one_cycle():
    cycle = Recorder()
    scheduler = Scheduler(cycle)

    assert await scheduler.run() == 1
    assert cycle.started == 1
    assert cycle.finished == 1
    assert scheduler.in_flight == 0


@pytest.mark.asyncio
async def test_budget_stops_new_cycles_and_waits_for_in_flight():
    cycle = Recorder(duration=0.08)
    scheduler = Scheduler(cycle, frequency=10, max_time=60)

    started = await asyncio.wait_for(scheduler.run(), timeout=5)

    assert started >= 2
    assert cycle.started == started
    # run() only returns once every started cycle has finished
    assert cycle.finished == started
    assert scheduler.in_flight == 0


@pytest.mark.asyncio
async def test_cycles_overlap_when_slower_than_frequency():
    cycle = Recorder(duration=0.05)
    scheduler = Scheduler(cycle, frequency=10, max_time=80)

    await asyncio.wait_for(scheduler.run(), timeout=5)

    assert cycle.peak > 1


@pytest.mark.asyncio
async def test_no_cycle_starts_after_budget():
    cycle = Recorder()
    scheduler = Scheduler(cycle, frequency=10, max_time=50)

    started = await asyncio.wait_for(scheduler.run(), timeout=5)
    await asyncio.sleep(0.05)

    assert cycle.started == started
    assert scheduler.cycles_started == started


@pytest.mark.asyncio
async def test_stop_drains_in_flight_cycles():
    cycle = Recorder(duration=0.1)
    scheduler = Scheduler(cycle, frequency=10)
    runner = asyncio.create_task(scheduler.run())

    await asyncio.sleep(0.035)
    scheduler.stop()
    started = await asyncio.wait_for(runner, timeout=5)

    assert started >= 1
    assert cycle.finished == started
    assert scheduler.in_flight == 0


@pytest.mark.asyncio
async def test_failing_cycle_does_not_stop_the_schedule():
    cycle = Recorder(fail_on=1)
    scheduler = Scheduler(cycle, frequency=10, max_time=60)

    started = await asyncio.wait_for(scheduler.run(), timeout=5)

    assert started >= 2
    assert cycle.finished == started


@pytest.mark.asyncio
async def test_one_shot_failure_is_contained():
    scheduler = Scheduler(Recorder(fail_on=1))
    assert await scheduler.run() == 1
    assert scheduler.in_flight == 0
