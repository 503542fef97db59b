"""The static tool catalog the server exposes.

Provider tools are added per the configured provider names, then ``ping``,
which is always present, and the registry is frozen.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from toolwire.tools.registry import ToolDescriptor, ToolRegistry

if TYPE_CHECKING:
    from toolwire.tools.context import ToolContext

logger = logging.getLogger(__name__)

PING = ToolDescriptor(name="ping", description="Responds with pong")

KNOWN_PROVIDERS = ("aws",)


async def ping(parameters: dict[str, Any], context: ToolContext) -> dict[str, Any]:
    return {"result": "pong"}


def build_registry(providers: Iterable[str] = KNOWN_PROVIDERS) -> ToolRegistry:
    """Build and freeze the registry for the given provider names.

    Raises:
        ValueError: For an unknown provider name.
        DuplicateToolError: If two catalog entries share a name.
    """
    registry = ToolRegistry()
    for name in providers:
        if name == "aws":
            from toolwire.providers.aws import AwsProvider

            for descriptor, handler in AwsProvider().tools():
                registry.register(descriptor, handler)
        else:
            msg = f"Unknown provider: {name!r} (known: {', '.join(KNOWN_PROVIDERS)})"
            raise ValueError(msg)

    registry.register(PING, ping)
    registry.freeze()
    logger.info("Tool registry built with %d tool(s)", len(registry))
    return registry
