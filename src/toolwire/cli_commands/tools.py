"""``toolwire tools`` — inspect the catalog and try tools locally."""

from __future__ import annotations

import asyncio
import json
import sys

import click

from toolwire.cli_commands._output import console, load_settings, print_tools_json, print_tools_table
from toolwire.errors import ConfigError


@click.group()
def tools() -> None:
    """Inspect and invoke tools."""


@tools.command("list")
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), default=None, help="Settings YAML file.")
@click.option("--json", "as_json", is_flag=True, help="Output as the tools/list payload.")
@click.option("--no-aws", is_flag=True, help="Show only the built-in tools.")
def list_tools(config: str | None, as_json: bool, no_aws: bool) -> None:
    """List every tool the server would expose."""
    from toolwire.tools.catalog import build_registry

    try:
        settings = load_settings(config, providers=[] if no_aws else None)
    except ConfigError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)

    descriptors = build_registry(settings.providers).list()
    if as_json:
        print_tools_json(descriptors)
    else:
        print_tools_table(descriptors)


@tools.command("invoke")
@click.argument("name")
@click.option("--params", "-p", default="{}", help="Tool parameters as a JSON object.")
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), default=None, help="Settings YAML file.")
@click.option("--region", default=None, help="Default AWS region.")
@click.option("--profile", default=None, help="AWS credentials profile.")
@click.option("--timeout", type=float, default=None, help="Abandon the call after this many seconds.")
def invoke_tool(
    name: str,
    params: str,
    config: str | None,
    region: str | None,
    profile: str | None,
    timeout: float | None,
) -> None:
    """Invoke tool NAME once and print the JSON-RPC response."""
    from toolwire.protocol import codec
    from toolwire.protocol.models import JsonRpcFailure
    from toolwire.runner import ServerRunner

    try:
        parameters = json.loads(params)
    except json.JSONDecodeError as exc:
        console.print(f"[red]Invalid --params JSON:[/red] {exc}")
        sys.exit(1)

    try:
        settings = load_settings(config, default_region=region, aws_profile=profile, invoke_timeout=timeout)
    except ConfigError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)

    dispatcher = ServerRunner(settings).build_dispatcher()
    message = {
        "jsonrpc": "2.0",
        "id": 1,
        "method": "tools/invoke",
        "params": {"name": name, "parameters": parameters},
    }
    response = asyncio.run(dispatcher.dispatch(message))
    if response is None:
        console.print(f"[red]No response for tool {name!r}[/red]")
        sys.exit(1)
    console.print_json(codec.encode(response))

    if isinstance(response, JsonRpcFailure):
        sys.exit(1)
