"""ToolRegistry — the startup-built name → (schema, handler) table.

Schemas and handlers live in two separate name-keyed tables and are only
joined when the dispatcher looks a tool up.

Usage::

    registry = ToolRegistry()
    registry.register(PING, ping)
    registry.freeze()

    registry.list()          # descriptors, registration order
    registry.lookup("ping")  # handler or None
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, model_validator

from toolwire.protocol.errors import DuplicateToolError, RegistryFrozenError
from toolwire.protocol.models import ToolListing

if TYPE_CHECKING:
    from toolwire.tools.context import ToolContext

logger = logging.getLogger(__name__)

Handler = Callable[[dict[str, Any], "ToolContext"], "Any | Awaitable[Any]"]


class ParameterSchema(BaseModel):
    """JSON-Schema-shaped description of a tool's parameters."""

    model_config = {"frozen": True}

    properties: dict[str, dict[str, Any]] = Field(default_factory=dict)
    required: tuple[str, ...] = ()

    @model_validator(mode="after")
    def _required_are_declared(self) -> ParameterSchema:
        missing = [name for name in self.required if name not in self.properties]
        if missing:
            msg = f"required parameters not declared in properties: {', '.join(missing)}"
            raise ValueError(msg)
        return self


class ToolDescriptor(BaseModel):
    """Static, immutable description of one tool."""

    model_config = {"frozen": True}

    name: str
    description: str = ""
    parameters: ParameterSchema = Field(default_factory=ParameterSchema)

    def to_listing(self) -> ToolListing:
        """Re-shape into the public ``tools/list`` entry."""
        return ToolListing(
            name=self.name,
            description=self.description,
            input_schema={
                "type": "object",
                "properties": dict(self.parameters.properties),
                "required": list(self.parameters.required),
                "additionalProperties": False,
            },
        )


class ToolRegistry:
    """Ordered tool catalog plus the handler table backing it."""

    def __init__(self) -> None:
        self._descriptors: dict[str, ToolDescriptor] = {}
        self._handlers: dict[str, Handler] = {}
        self._frozen = False

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, descriptor: ToolDescriptor, handler: Handler) -> None:
        """Add a tool. Only valid while the registry is being built.

        Raises:
            RegistryFrozenError: After :meth:`freeze` was called.
            DuplicateToolError: If the name is already registered.
        """
        if self._frozen:
            raise RegistryFrozenError(descriptor.name)
        if descriptor.name in self._descriptors:
            raise DuplicateToolError(descriptor.name)
        self._descriptors[descriptor.name] = descriptor
        self._handlers[descriptor.name] = handler
        logger.debug("Registered tool: %s", descriptor.name)

    def freeze(self) -> None:
        """Make the registry read-only."""
        self._frozen = True

    def list(self) -> tuple[ToolDescriptor, ...]:
        """Return every descriptor in registration order."""
        return tuple(self._descriptors.values())

    def lookup(self, name: Any) -> Handler | None:
        """Return the handler for *name*, or ``None`` when it is not registered."""
        if not isinstance(name, str):
            return None
        return self._handlers.get(name)
