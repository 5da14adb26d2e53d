# agent/executor.py
from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable, Iterable, List, Optional, TypeVar

import httpx

from rapidworker.actions import ConfigurationError, HttpAction, build_action, resolve
from rapidworker.actions.base import elapsed_ms
from rapidworker.config import WorkerSettings
from rapidworker.context import Context
from rapidworker.model import ActionOutcome, ActionReport, ActionStep, ExecutionResult
from rapidworker.template import PLACEHOLDER, substitute
from rapidworker.ui.console import get_console

from .api_client import APIClient, APIError
from .models import RequestJob, RequestResultPayload, TestJob, TestResultPayload

J = TypeVar("J")


async def _report(send: Awaitable[None], job_id: str) -> bool:
    """
    Deliver one result, best effort.

    Coordinator failures are logged and dropped: no retry, no persistence.
    """
    try:
        await send
        return True
    except APIError as e:
        get_console().print_error(
            "Failed to send result",
            f"Could not report job {job_id} to the coordinator: {e}",
        )
        return False


# ----------------------------------------------------------------------
# Request jobs
# ----------------------------------------------------------------------

async def process_request(
    definition: dict,
    context: Context,
    client: Optional[httpx.AsyncClient] = None,
) -> ActionOutcome:
    """Evaluate one resolved request definition."""
    action = HttpAction(definition, client=client)
    return await action.evaluate(context)


async def execute_request(
    job: RequestJob,
    api_client: APIClient,
    client: Optional[httpx.AsyncClient] = None,
    *,
    strict: bool = False,
) -> ExecutionResult:
    """
    Run one request job end to end: context, substitution, evaluation, report.

    Raises whatever the pipeline raises before the report; callers isolate
    jobs with ``run_isolated``.
    """
    context = Context.create(job.test_variables, job.env_variables)
    definition = substitute(job.request, context, strict=strict)
    outcome = await process_request(definition, context, client)
    result = ExecutionResult.from_outcome(outcome)

    get_console().print_job_result("request", job.id, outcome.success, result.execution_time)
    payload = RequestResultPayload(response=result.response, execution_time=result.execution_time)
    await _report(api_client.send_request_result(job.id, payload), job.id)
    return result


# ----------------------------------------------------------------------
# Test jobs
# ----------------------------------------------------------------------

def validate_steps(steps: Iterable[ActionStep], context: Context) -> None:
    """
    Check every step can be built before any of them runs.

    Parameters are resolved against the intake Context, which is enough to
    catch unknown action names and database dialects. A dialect that is still
    a placeholder is left for the check right before its step runs.

    Raises:
        ConfigurationError: unknown action or dialect
    """
    for step in steps:
        parameters = substitute(step.parameters, context)
        if resolve(step.action) is not None and _unresolved(parameters.get("dialect")):
            continue
        build_action(step.action, parameters)


def _unresolved(value: Any) -> bool:
    return isinstance(value, str) and PLACEHOLDER.search(value) is not None


def _configuration_failure(message: str, started: float) -> ActionOutcome:
    return ActionOutcome(
        action_reports=[
            ActionReport(
                action="Test.configure",
                success=False,
                short_summary=message,
                time=elapsed_ms(started),
            )
        ]
    )


async def process_test(
    steps: List[ActionStep],
    context: Context,
    client: Optional[httpx.AsyncClient] = None,
    *,
    strict: bool = False,
) -> ActionOutcome:
    """
    Evaluate a test's actions in order against one shared Context.

    Each step is resolved right before it runs so values written by earlier
    actions are visible. Stops after the first failed action.
    """
    started = time.perf_counter()
    if not steps:
        return _configuration_failure("Test has no actions", started)
    try:
        validate_steps(steps, context)
    except ConfigurationError as e:
        return _configuration_failure(str(e), started)

    reports: List[ActionReport] = []
    response = None
    for step in steps:
        parameters = substitute(step.parameters, context, strict=strict)
        try:
            action = build_action(step.action, parameters, client=client)
        except ConfigurationError as e:
            # dialect placeholder an earlier action was expected to fill
            reports.extend(_configuration_failure(str(e), time.perf_counter()).action_reports)
            break
        outcome = await action.evaluate(context)
        reports.extend(outcome.action_reports)
        if outcome.response is not None:
            response = outcome.response
        if not outcome.success:
            break
    return ActionOutcome(action_reports=reports, response=response)


async def execute_test(
    job: TestJob,
    api_client: APIClient,
    client: Optional[httpx.AsyncClient] = None,
    *,
    strict: bool = False,
) -> ActionOutcome:
    """Run one test job end to end and report its action reports."""
    context = Context.create(job.test_variables, job.env_variables)
    outcome = await process_test(job.steps(), context, client, strict=strict)

    get_console().print_job_result("test", job.id, outcome.success, outcome.time)
    payload = TestResultPayload(
        success=outcome.success,
        action_reports=[r.to_dict() for r in outcome.action_reports],
        execution_time=outcome.time,
    )
    await _report(api_client.send_test_result(job.id, payload), job.id)
    return outcome


# ----------------------------------------------------------------------
# Batches
# ----------------------------------------------------------------------

def _job_id(job: Any) -> str:
    if isinstance(job, dict):
        return str(job.get("id", "?"))
    return str(getattr(job, "id", "?"))


async def run_isolated(job: J, execute: Callable[[J], Awaitable[object]]) -> bool:
    """
    Run one job; any exception is logged and kept away from sibling jobs.

    ``execute`` may raise before returning its coroutine (a job that fails
    validation); that is contained the same way.
    """
    job_id = _job_id(job)
    try:
        await execute(job)
        return True
    except Exception as e:
        console = get_console()
        console.print_error("Job failed", f"Job {job_id} could not be executed: {type(e).__name__}")
        console.print_exception(e)
        return False


async def execute_batch(
    jobs: List[J],
    execute: Callable[[J], Awaitable[object]],
    concurrency: Optional[int] = None,
) -> List[bool]:
    """
    Fan a batch out concurrently. No cap unless ``concurrency`` is set.

    Returns one flag per job, True when it ran to completion.
    """
    semaphore = asyncio.Semaphore(concurrency) if concurrency else None

    async def run_one(job: J) -> bool:
        if semaphore is None:
            return await run_isolated(job, execute)
        async with semaphore:
            return await run_isolated(job, execute)

    return list(await asyncio.gather(*(run_one(j) for j in jobs)))


async def fetch_and_execute_requests(
    settings: WorkerSettings,
    api_client: APIClient,
    client: Optional[httpx.AsyncClient] = None,
) -> int:
    """One cycle over pending request jobs. Returns how many were fetched."""
    console = get_console()
    console.print_fetching("requests", api_client.url(f"/api/location/request?amount={settings.batch_size}"))
    try:
        jobs = await api_client.fetch_requests()
    except APIError as e:
        console.print_error("Failed to fetch requests", str(e))
        return 0
    if not jobs:
        return 0

    await execute_batch(
        jobs,
        lambda raw: execute_request(
            RequestJob.model_validate(raw), api_client, client, strict=settings.strict_placeholders
        ),
        settings.concurrency,
    )
    console.print_batch_executed("requests", len(jobs))
    return len(jobs)


async def fetch_and_execute_tests(
    settings: WorkerSettings,
    api_client: APIClient,
    client: Optional[httpx.AsyncClient] = None,
) -> int:
    """One cycle over pending test executions. Returns how many were fetched."""
    console = get_console()
    console.print_fetching("tests", api_client.url(f"/api/location/execution?amount={settings.batch_size}"))
    try:
        jobs = await api_client.fetch_tests()
    except APIError as e:
        console.print_error("Failed to fetch tests", str(e))
        return 0
    if not jobs:
        return 0

    await execute_batch(
        jobs,
        lambda raw: execute_test(
            TestJob.model_validate(raw), api_client, client, strict=settings.strict_placeholders
        ),
        settings.concurrency,
    )
    console.print_batch_executed("tests", len(jobs))
    return len(jobs)


async def execute_once(
    settings: WorkerSettings,
    api_client: APIClient,
    client: Optional[httpx.AsyncClient] = None,
) -> None:
    """A full cycle: tests and requests are fetched and run side by side."""
    await asyncio.gather(
        fetch_and_execute_tests(settings, api_client, client),
        fetch_and_execute_requests(settings, api_client, client),
    )
