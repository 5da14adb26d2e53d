# config.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

DEFAULT_BASE_URL = "https://rapidapi.com/testing"
DEFAULT_BATCH_SIZE = 100
LOGGING_LEVELS = ("off", "on", "cli")

# Coordinator calls (fetch, report) share one fixed timeout, in seconds
COORDINATOR_TIMEOUT = 15.0


@dataclass(frozen=True)
class WorkerSettings:
    """
    Worker configuration, built once at startup and passed explicitly to the
    API client, executor and scheduler. Never mutated during a run.

    ``frequency`` and ``max_time`` are milliseconds. No frequency means the
    worker runs a single cycle; no max_time means it polls until stopped.
    """
    location_secret: str
    location_key: str
    base_url: str = DEFAULT_BASE_URL
    location_context: Optional[str] = None
    batch_size: int = DEFAULT_BATCH_SIZE
    frequency: Optional[int] = None
    max_time: Optional[int] = None
    logging: str = "off"
    ignore_ssl: bool = False
    concurrency: Optional[int] = None
    strict_placeholders: bool = False

    def __post_init__(self) -> None:
        # Ensure base_url doesn't end with /
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))
        if self.location_context == "Default":
            object.__setattr__(self, "location_context", None)
        if self.logging not in LOGGING_LEVELS:
            raise ValueError(f"logging must be one of {LOGGING_LEVELS}, got {self.logging!r}")
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if self.concurrency is not None and self.concurrency < 1:
            raise ValueError("concurrency must be at least 1 when set")

    @property
    def logging_enabled(self) -> bool:
        return self.logging in ("on", "cli")

    @property
    def one_shot(self) -> bool:
        return not self.frequency

    def location_headers(self) -> Dict[str, str]:
        headers = {
            "x-location-secret": self.location_secret,
            "x-location-key": self.location_key,
        }
        if self.location_context:
            headers["x-location-context"] = self.location_context
        return headers

    def masked_secret(self) -> str:
        return f"{self.location_secret[:3]}********"
