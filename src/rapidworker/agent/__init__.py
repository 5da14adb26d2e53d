from .api_client import APIClient, APIError
from .scheduler import Scheduler
from .agent import Agent, run_agent

__all__ = ["APIClient", "APIError", "Scheduler", "Agent", "run_agent"]
