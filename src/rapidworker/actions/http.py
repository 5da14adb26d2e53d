"""HTTP action: sends one request to the endpoint under test."""
from __future__ import annotations

import time
from typing import Any, Dict, Optional

import httpx

from rapidworker.context import Context
from rapidworker.model import ActionOutcome
from rapidworker.template import to_text

from .base import BaseAction


def response_payload(response: httpx.Response) -> Dict[str, Any]:
    """Plain-data view of a response; JSON bodies are decoded, others kept as text."""
    try:
        data: Any = response.json()
    except ValueError:
        data = response.text
    return {
        "status": response.status_code,
        "statusText": response.reason_phrase,
        "headers": dict(response.headers),
        "data": data,
        "size": len(response.content),
    }


class HttpAction(BaseAction):
    """
    Parameters (already template-resolved):
      method, url, headers, params, data, timeout (seconds, optional)

    ``data`` given as a dict or list is sent as JSON, anything else as the raw
    request body.
    """

    name = "Http.request"

    def __init__(
        self,
        parameters: Optional[Dict[str, Any]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(parameters)
        self.client = client

    @property
    def method(self) -> str:
        return str(self.parameters.get("method") or "GET").upper()

    def _request_kwargs(self) -> Dict[str, Any]:
        p = self.parameters
        # whole-value placeholders may have put numbers/bools into headers
        headers = {k: to_text(v) for k, v in (p.get("headers") or {}).items() if v is not None}
        kwargs: Dict[str, Any] = {
            "headers": headers or None,
            "params": p.get("params") or None,
        }
        data = p.get("data", p.get("body"))
        if isinstance(data, (dict, list)):
            kwargs["json"] = data
        elif data is not None:
            kwargs["content"] = data if isinstance(data, bytes) else str(data)
        if p.get("timeout") is not None:
            kwargs["timeout"] = float(p["timeout"])
        return kwargs

    async def _send(self, client: httpx.AsyncClient) -> httpx.Response:
        return await client.request(self.method, self.parameters["url"], **self._request_kwargs())

    async def _evaluate(self, context: Context, started: float) -> ActionOutcome:
        url = self.parameters.get("url")
        if not url:
            return self.fail("URL must be provided, got none", started)

        t0 = time.perf_counter()
        try:
            if self.client is not None:
                response = await self._send(self.client)
            else:
                async with httpx.AsyncClient(timeout=None) as client:
                    response = await self._send(client)
        except httpx.HTTPError as e:
            return self.fail(
                f"{self.method} {url} failed: {type(e).__name__}",
                t0,
                long_summary=str(e) or None,
            )

        payload = response_payload(response)
        ok = not response.is_error
        summary = f"{self.method} {url} returned {response.status_code}"
        return ActionOutcome(
            action_reports=[self.report(ok, summary, t0)],
            response=payload,
        )


def http_method_action(method: str):
    """Factory pinning the HTTP method, used for ``Http.get`` style names."""

    def factory(parameters: Optional[Dict[str, Any]] = None, client=None) -> HttpAction:
        action = HttpAction({**(parameters or {}), "method": method}, client=client)
        action.name = f"Http.{method.lower()}"
        return action

    factory.__name__ = f"http_{method.lower()}"
    return factory
