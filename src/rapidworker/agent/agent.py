# agent/agent.py
from __future__ import annotations

import asyncio
import signal
from typing import Optional

import httpx

from rapidworker.config import WorkerSettings
from rapidworker.ui.console import get_console

from .api_client import APIClient
from .executor import execute_once
from .scheduler import Scheduler


def build_action_client(settings: WorkerSettings) -> httpx.AsyncClient:
    """Client for outbound action calls. Only a job's own ``timeout`` parameter limits a call."""
    return httpx.AsyncClient(
        verify=not settings.ignore_ssl,
        follow_redirects=True,
        timeout=None,
    )


class Agent:
    """Worker that polls the coordinator for tests and requests and executes them."""

    def __init__(
        self,
        settings: WorkerSettings,
        api_client: Optional[APIClient] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize agent.

        Args:
            settings: Worker settings, shared read-only by every cycle
            api_client: Coordinator client (built from settings when omitted)
            client: httpx client used by HTTP actions (built when omitted)
        """
        self.settings = settings
        self.api_client = api_client or APIClient(settings)
        self._client = client
        self.scheduler = Scheduler(
            self.execute_once,
            frequency=settings.frequency,
            max_time=settings.max_time,
        )

    def _signal_handler(self, signum: int) -> None:
        """Handle shutdown signals."""
        console = get_console()
        console.print_info(f"\nReceived signal {signum}, finishing in-flight cycles...")
        self.scheduler.stop()

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(signum, self._signal_handler, signum)
            except (NotImplementedError, RuntimeError):
                # not supported on this platform or loop; Ctrl+C still ends the process
                get_console().print_debug(f"Signal handler for {signum} not installed")

    async def execute_once(self) -> None:
        await execute_once(self.settings, self.api_client, self._client)

    async def run(self, install_signal_handlers: bool = True) -> int:
        """Run the agent loop. Returns the number of cycles started."""
        if install_signal_handlers:
            self._install_signal_handlers()

        owns_client = self._client is None
        if owns_client:
            self._client = build_action_client(self.settings)
        try:
            async with self.api_client:
                return await self.scheduler.run()
        finally:
            if owns_client:
                await self._client.aclose()
                self._client = None


def run_agent(settings: WorkerSettings) -> int:
    """
    Run the worker until its schedule completes.

    Args:
        settings: Worker settings built by the CLI
    """
    agent = Agent(settings)
    return asyncio.run(agent.run())
