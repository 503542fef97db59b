"""Invocation context handed to every tool handler.

Provider configuration is shared by reference: a handler that switches the
active region changes it for every later invocation.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class ProviderConfig(BaseModel):
    """Process-wide settings used by provider collaborators."""

    model_config = {"validate_assignment": True}

    region: str = "us-west-2"
    profile: str | None = None


class ToolContext(BaseModel):
    """Per-invocation view: which tool, which request, which shared config."""

    tool_name: str
    request_id: Any = None
    config: ProviderConfig
