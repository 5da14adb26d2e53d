import json
from typing import Callable, Dict, List, Optional

import httpx
import pytest

from rapidworker.agent.api_client import APIClient
from rapidworker.config import WorkerSettings
from rapidworker.ui.console import Console, set_console

BASE_URL = "https://coordinator.test"


@pytest.fixture(autouse=True)
def quiet_console():
    console = Console(logging="off")
    set_console(console)
    yield console


@pytest.fixture
def settings() -> WorkerSettings:
    return WorkerSettings(
        base_url=BASE_URL,
        location_secret="secret-123",
        location_key="loc-key",
        location_context="org-1",
        batch_size=5,
    )


class FakeCoordinator:
    """
    In-memory coordinator + target API behind one httpx.MockTransport.

    ``requests`` / ``executions`` are served once on the matching GET; every
    POST body is recorded in ``reports`` keyed by path.
    """

    def __init__(
        self,
        requests: Optional[list] = None,
        executions: Optional[list] = None,
        target: Optional[Callable[[httpx.Request], httpx.Response]] = None,
        report_status: int = 200,
    ):
        self.requests = requests
        self.executions = executions
        self.target = target
        self.report_status = report_status
        self.fetches: List[httpx.Request] = []
        self.reports: Dict[str, dict] = {}
        self.target_calls: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if request.url.host == "coordinator.test":
            if request.method == "GET" and path == "/api/location/request":
                self.fetches.append(request)
                body = {} if self.requests is None else {"requests": self.requests}
                return httpx.Response(200, json=body)
            if request.method == "GET" and path == "/api/location/execution":
                self.fetches.append(request)
                body = {} if self.executions is None else {"executions": self.executions}
                return httpx.Response(200, json=body)
            if request.method == "POST":
                self.reports[path] = json.loads(request.content)
                return httpx.Response(self.report_status, json={"ok": True})
            return httpx.Response(404)

        self.target_calls.append(request)
        if self.target is not None:
            return self.target(request)
        return httpx.Response(200, json={"echo": request.url.path})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def make_clients(settings):
    """Build (api_client, action_client) pairs sharing one FakeCoordinator."""
    def _make(coordinator: FakeCoordinator, worker_settings: WorkerSettings = None):
        transport = coordinator.transport()
        api = APIClient(worker_settings or settings, client=httpx.AsyncClient(transport=transport))
        actions = httpx.AsyncClient(transport=transport)
        return api, actions

    return _make
