"""``toolwire serve`` — run the JSON-RPC server on stdin/stdout."""

from __future__ import annotations

import asyncio
import sys

import click

from toolwire.cli_commands._output import err_console, load_settings
from toolwire.errors import ConfigError


@click.command()
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), default=None, help="Settings YAML file.")
@click.option("--region", default=None, help="Default AWS region.")
@click.option("--profile", default=None, help="AWS credentials profile.")
@click.option(
    "--concurrency",
    type=click.Choice(["sequential", "concurrent"]),
    default=None,
    help="Process one request at a time, or many in flight.",
)
@click.option("--timeout", type=float, default=None, help="Abandon a tool call after this many seconds.")
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="Diagnostic log file.")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Diagnostic log level.",
)
@click.option("--verbose", "-v", is_flag=True, help="Also log to stderr.")
@click.option("--telemetry", is_flag=True, help="Enable telemetry.")
@click.option("--no-aws", is_flag=True, help="Expose only the built-in tools.")
def serve(
    config: str | None,
    region: str | None,
    profile: str | None,
    concurrency: str | None,
    timeout: float | None,
    log_file: str | None,
    log_level: str | None,
    verbose: bool,
    telemetry: bool,
    no_aws: bool,
) -> None:
    """Serve the tool catalog over line-delimited JSON-RPC on stdio."""
    from toolwire.config import TelemetrySettings
    from toolwire.runner import ServerRunner
    from toolwire.utils.logging import configure_logging

    try:
        settings = load_settings(
            config,
            default_region=region,
            aws_profile=profile,
            concurrency=concurrency,
            invoke_timeout=timeout,
            log_file=log_file,
            log_level=log_level,
            providers=[] if no_aws else None,
        )
    except ConfigError as exc:
        err_console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)

    if telemetry:
        if settings.telemetry is None:
            settings.telemetry = TelemetrySettings(enabled=True)
        else:
            settings.telemetry.enabled = True

    configure_logging(settings.log_file, level=settings.log_level, verbose=verbose)

    try:
        asyncio.run(ServerRunner(settings).run())
    except KeyboardInterrupt:
        pass
    except Exception as exc:
        err_console.print(f"[red]Server error:[/red] {exc}")
        sys.exit(1)
