"""Console output formatting utilities for rapidworker."""

from __future__ import annotations

import sys
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from rapidworker.config import WorkerSettings


class Console:
    """Centralized console output formatting."""

    def __init__(self, logging: str = "off", debug: bool = False):
        """
        Initialize console formatter.

        Args:
            logging: "off" prints errors only, "on" adds progress lines,
                "cli" also prints the settings banner at startup
            debug: If True, show stack traces for exceptions
        """
        self.logging = logging
        self.debug = debug

    @property
    def enabled(self) -> bool:
        return self.logging in ("on", "cli")

    def print_settings(self, settings: WorkerSettings, version: str) -> None:
        """Print the startup banner (logging=cli only)."""
        if self.logging != "cli":
            return
        print(f"\nWORKER STARTED (version {version})")
        print(f"Base URL <url>: {settings.base_url}")
        print(f"Location secret <secret>: {settings.masked_secret()}")
        print(f"Location key <key>: {settings.location_key}")
        print(f"Context (user or organization ID) <context>: {settings.location_context}")
        print(f"Polling frequency in ms <frequency>: {settings.frequency}")
        print(f"Maximum polling time in ms <max>: {settings.max_time}")
        print(f"Jobs to dequeue per cycle <batch>: {settings.batch_size}")
        print(f"Concurrency cap <concurrency>: {settings.concurrency or 'unbounded'}")
        print(f"Ignore missing SSL certificates: {settings.ignore_ssl}")
        print()

    def print_cycle_started(self, cycle: int) -> None:
        if self.enabled:
            print(f"\nCYCLE STARTED: {cycle}")

    def print_fetching(self, kind: str, url: str) -> None:
        if self.enabled:
            print(f"Fetching {kind} from {url}")

    def print_batch_executed(self, kind: str, count: int) -> None:
        if self.enabled:
            print(f"Executed {count} {kind}")

    def print_job_result(self, kind: str, job_id: str, success: bool, time_ms: Optional[float]) -> None:
        if not self.enabled:
            return
        status = "success" if success else "failed"
        duration = f" ({time_ms:.1f}ms)" if time_ms is not None else ""
        print(f"{kind.upper()} {job_id}: {status}{duration}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: BaseException) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exception(type(exc), exc, exc.__traceback__)
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message (suppressed when logging is off)."""
        if self.enabled:
            print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
