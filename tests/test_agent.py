import dataclasses

import httpx
import pytest

from conftest import FakeCoordinator
from rapidworker.agent import Agent
from rapidworker.agent.agent import build_action_client


@pytest.mark.asyncio
async def test_agent_one_shot_fetches_once(settings, make_clients):
    coordinator = FakeCoordinator(requests=[], executions=[])
    api, actions = make_clients(coordinator)

    agent = Agent(settings, api_client=api, client=actions)
    cycles = await agent.run(install_signal_handlers=False)

    assert cycles == 1
    paths = sorted(r.url.path for r in coordinator.fetches)
    assert paths == ["/api/location/execution", "/api/location/request"]


@pytest.mark.asyncio
async def test_agent_continuous_runs_until_budget(settings, make_clients):
    continuous = dataclasses.replace(settings, frequency=10, max_time=60)
    coordinator = FakeCoordinator(requests=[], executions=[])
    api, actions = make_clients(coordinator, continuous)

    agent = Agent(continuous, api_client=api, client=actions)
    cycles = await agent.run(install_signal_handlers=False)

    assert cycles >= 2
    assert len(coordinator.fetches) == 2 * cycles
    assert agent.scheduler.in_flight == 0


@pytest.mark.asyncio
async def test_agent_survives_unreachable_coordinator(settings):
    def down(request):
        raise httpx.ConnectError("refused", request=request)

    from rapidworker.agent import APIClient

    api = APIClient(settings, client=httpx.AsyncClient(transport=httpx.MockTransport(down)))
    agent = Agent(settings, api_client=api, client=httpx.AsyncClient(transport=httpx.MockTransport(down)))

    assert await agent.run(install_signal_handlers=False) == 1


@pytest.mark.asyncio
async def test_action_client_has_no_engine_timeout(settings):
    client = build_action_client(settings)
    try:
        assert client.timeout == httpx.Timeout(None)
    finally:
        await client.aclose()


@pytest.mark.asyncio
async def test_ignore_ssl_turns_off_certificate_checks(settings, monkeypatch):
    seen = []
    real_client = httpx.AsyncClient

    class RecordingClient(real_client):
        def __init__(self, **kwargs):
            seen.append(kwargs)
            super().__init__(**kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", RecordingClient)

    for ignore_ssl in (True, False):
        client = build_action_client(dataclasses.replace(settings, ignore_ssl=ignore_ssl))
        await client.aclose()

    assert [kwargs["verify"] for kwargs in seen] == [False, True]
