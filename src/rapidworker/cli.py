# cli.py
from __future__ import annotations

import sys

import click

from rapidworker import __version__
from rapidworker.config import DEFAULT_BASE_URL, DEFAULT_BATCH_SIZE, LOGGING_LEVELS, WorkerSettings
from rapidworker.ui.console import Console, get_console, set_console


def build_settings(
    url: str,
    secret: str,
    key: str,
    context: str | None,
    frequency: int | None,
    max_time: int | None,
    batch: int,
    logging: str,
    ignore_ssl: bool,
    concurrency: int | None,
    strict_placeholders: bool,
) -> WorkerSettings:
    """Turn parsed options into the settings value shared by the whole run."""
    return WorkerSettings(
        base_url=url,
        location_secret=secret,
        location_key=key,
        location_context=context or None,
        batch_size=batch,
        frequency=frequency or None,
        max_time=max_time or None,
        logging=logging,
        ignore_ssl=ignore_ssl,
        concurrency=concurrency or None,
        strict_placeholders=strict_placeholders,
    )


@click.command()
@click.version_option(__version__, prog_name="rapidworker")
@click.option(
    "-u", "--url",
    envvar="BASE_URL",
    default=DEFAULT_BASE_URL,
    show_default=True,
    help="The base URL to fetch executions from (env: BASE_URL)",
)
@click.option(
    "-s", "--secret",
    envvar=["LOCATION_SECRET", "KEY"],
    required=True,
    help="Location secret for fetching executions (env: LOCATION_SECRET)",
)
@click.option(
    "-k", "--key",
    envvar=["LOCATION_KEY", "LOCATION"],
    required=True,
    help="Location key for fetching executions. Must match secret (env: LOCATION_KEY)",
)
@click.option(
    "-c", "--context",
    envvar="LOCATION_CONTEXT",
    default=None,
    help="API context (user or organization ID) for fetching executions (env: LOCATION_CONTEXT)",
)
@click.option(
    "-f", "--frequency",
    envvar=["FREQUENCY", "INTERVAL"],
    type=click.IntRange(min=0),
    default=None,
    help="ms between fetching new executions. Without it the worker runs once (env: FREQUENCY)",
)
@click.option(
    "-m", "--max", "max_time",
    envvar="POLLING_TIME_MAX",
    type=click.IntRange(min=0),
    default=None,
    help="Max ms to keep starting new cycles. Without it the worker polls until stopped (env: POLLING_TIME_MAX)",
)
@click.option(
    "-b", "--batch",
    envvar="BATCH_SIZE",
    type=click.IntRange(min=1),
    default=DEFAULT_BATCH_SIZE,
    show_default=True,
    help="Number of executions to process each cycle (env: BATCH_SIZE)",
)
@click.option(
    "-l", "--logging",
    envvar="WORKER_LOGGING",
    type=click.Choice(LOGGING_LEVELS),
    default="off",
    show_default=True,
    help="Logging level. 'cli' prints the settings at startup (env: WORKER_LOGGING)",
)
@click.option(
    "--ignore-ssl/--verify-ssl",
    envvar="IGNORE_MISSING_SSL_CERT",
    default=False,
    help="Ignore a missing or self-signed SSL certificate from an API endpoint (env: IGNORE_MISSING_SSL_CERT)",
)
@click.option(
    "--concurrency",
    envvar="WORKER_CONCURRENCY",
    type=click.IntRange(min=1),
    default=None,
    help="Cap on jobs running at once within a batch. Unbounded when unset (env: WORKER_CONCURRENCY)",
)
@click.option(
    "--strict-placeholders/--lenient-placeholders",
    envvar="STRICT_PLACEHOLDERS",
    default=False,
    help="Fail a job when a {{placeholder}} has no value instead of leaving it as text",
)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Show stack traces for failed jobs",
)
def cli(url, secret, key, context, frequency, max_time, batch, logging, ignore_ssl, concurrency, strict_placeholders, debug):
    """Start a worker to execute API tests and requests."""
    from rapidworker.agent.agent import run_agent

    console = Console(logging=logging, debug=debug)
    set_console(console)

    try:
        settings = build_settings(
            url, secret, key, context, frequency, max_time, batch,
            logging, ignore_ssl, concurrency, strict_placeholders,
        )
    except ValueError as e:
        raise click.BadParameter(str(e))

    console.print_settings(settings, __version__)

    try:
        run_agent(settings)
    except KeyboardInterrupt:
        console.print_info("\nWorker stopped by user")
        sys.exit(130)
    except Exception as e:
        get_console().print_exception(e)
        sys.exit(1)


if __name__ == "__main__":
    cli()
