"""Shared fixtures: a small tool registry and an in-memory line transport."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterator
from typing import Any

import pytest

from toolwire.protocol.dispatcher import Dispatcher
from toolwire.tools.catalog import PING, ping
from toolwire.tools.context import ProviderConfig, ToolContext
from toolwire.tools.registry import ParameterSchema, ToolDescriptor, ToolRegistry


class MemoryTransport:
    """Feeds a fixed list of lines and records everything written."""

    def __init__(self, lines: list[str] | None = None) -> None:
        self._lines = list(lines or [])
        self.written: list[str] = []

    async def read_line(self) -> str | None:
        await asyncio.sleep(0)
        if not self._lines:
            return None
        return self._lines.pop(0)

    async def write_line(self, line: str) -> None:
        self.written.append(line)

    def messages(self) -> list[dict[str, Any]]:
        return [json.loads(line) for line in self.written]


def _echo(parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
    return {"echo": parameters}


async def _boom(parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
    raise RuntimeError("kaboom")


async def _set_region(parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
    context.config.region = parameters["region"]
    return {"region": context.config.region}


def build_test_registry() -> ToolRegistry:
    registry = ToolRegistry()
    registry.register(PING, ping)
    registry.register(
        ToolDescriptor(
            name="echo",
            description="Echo parameters back",
            parameters=ParameterSchema(properties={"text": {"type": "string"}}),
        ),
        _echo,
    )
    registry.register(ToolDescriptor(name="boom", description="Always fails"), _boom)
    registry.register(
        ToolDescriptor(
            name="set_region",
            description="Switch the active region",
            parameters=ParameterSchema(properties={"region": {"type": "string"}}, required=("region",)),
        ),
        _set_region,
    )
    registry.freeze()
    return registry


@pytest.fixture
def registry() -> ToolRegistry:
    return build_test_registry()


@pytest.fixture
def provider_config() -> ProviderConfig:
    return ProviderConfig(region="us-west-2")


@pytest.fixture
def dispatcher(registry: ToolRegistry, provider_config: ProviderConfig) -> Dispatcher:
    return Dispatcher(registry, provider_config=provider_config)


@pytest.fixture
def memory_transport() -> type[MemoryTransport]:
    return MemoryTransport


@pytest.fixture(autouse=True)
def _reset_toolwire_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger("toolwire")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
