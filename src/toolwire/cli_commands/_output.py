"""Shared CLI output formatters and settings resolution."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.table import Table

from toolwire.config import ServerSettings, SettingsLoader, build_settings

if TYPE_CHECKING:
    from toolwire.tools.registry import ToolDescriptor

console = Console()
# ``serve`` owns stdout for the JSON-RPC stream; its diagnostics go here.
err_console = Console(stderr=True)


def load_settings(config: str | None, **overrides: Any) -> ServerSettings:
    """Settings from *config* (when given) with CLI *overrides* on top."""
    if config:
        return SettingsLoader(Path(config)).load(**overrides)
    return build_settings(**overrides)


def print_tools_table(descriptors: tuple[ToolDescriptor, ...]) -> None:
    """Pretty-print the tool catalog as a table."""
    table = Table(title="Tool Catalog")
    table.add_column("Name", style="cyan")
    table.add_column("Required")
    table.add_column("Description")

    for descriptor in descriptors:
        table.add_row(
            descriptor.name,
            ", ".join(descriptor.parameters.required) or "-",
            _truncate(descriptor.description),
        )

    console.print(table)


def print_tools_json(descriptors: tuple[ToolDescriptor, ...]) -> None:
    """Print the catalog exactly as ``tools/list`` would return it."""
    listings = [d.to_listing().model_dump(by_alias=True) for d in descriptors]
    console.print_json(json.dumps({"tools": listings}))


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
