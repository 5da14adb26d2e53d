# agent/api_client.py
from __future__ import annotations

from typing import Any, List, Optional

import httpx
from pydantic import ValidationError

from rapidworker.config import COORDINATOR_TIMEOUT, WorkerSettings

from .models import RequestBatch, RequestResultPayload, TestBatch, TestResultPayload


class APIError(Exception):
    """Raised when coordinator requests fail."""
    pass


class APIClient:
    """HTTP client for communicating with the testing coordinator."""

    def __init__(self, settings: WorkerSettings, client: Optional[httpx.AsyncClient] = None):
        """
        Initialize API client.

        Args:
            settings: Worker settings (base URL and location credentials)
            client: Optional pre-built httpx client, mostly for tests
        """
        self.settings = settings
        self.base_url = settings.base_url
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> APIClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=COORDINATOR_TIMEOUT)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=COORDINATOR_TIMEOUT)
            self._owns_client = True
        return self._client

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        data: Optional[dict] = None,
    ) -> Any:
        """
        Make an HTTP request to the coordinator.

        Returns:
            Parsed JSON response (None for an empty body)

        Raises:
            APIError: If the request fails
        """
        try:
            response = await self.client.request(
                method,
                self.url(path),
                params=params,
                json=data,
                headers=self.settings.location_headers(),
                timeout=COORDINATOR_TIMEOUT,
            )
        except httpx.HTTPError as e:
            raise APIError(f"Network error: {type(e).__name__}: {e}") from e

        if response.is_error:
            raise APIError(
                f"API request failed: {response.status_code} {response.reason_phrase}. {response.text}"
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise APIError(f"Invalid JSON response: {e}") from e

    async def fetch_requests(self) -> List[Any]:
        """
        Dequeue up to batch_size pending request jobs. Empty list when none.

        Jobs come back as raw payloads; see ``RequestJob``.
        """
        body = await self._request(
            "GET", "/api/location/request", params={"amount": self.settings.batch_size}
        )
        try:
            batch = RequestBatch.model_validate(body or {})
        except ValidationError as e:
            raise APIError(f"Invalid requests payload: {e}") from e
        return batch.requests or []

    async def fetch_tests(self) -> List[Any]:
        """
        Dequeue up to batch_size pending test executions. Empty list when none.

        Jobs come back as raw payloads; see ``TestJob``.
        """
        body = await self._request(
            "GET", "/api/location/execution", params={"amount": self.settings.batch_size}
        )
        try:
            batch = TestBatch.model_validate(body or {})
        except ValidationError as e:
            raise APIError(f"Invalid executions payload: {e}") from e
        return batch.executions or []

    async def send_request_result(self, job_id: str, result: RequestResultPayload) -> None:
        await self._request(
            "POST",
            f"/api/location/request/{job_id}",
            data=result.model_dump(by_alias=True),
        )

    async def send_test_result(self, job_id: str, result: TestResultPayload) -> None:
        await self._request(
            "POST",
            f"/api/location/execution/{job_id}",
            data=result.model_dump(by_alias=True),
        )
