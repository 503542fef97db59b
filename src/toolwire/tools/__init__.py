"""Tool layer — registry, invocation adapter and the static catalog."""

from toolwire.tools.context import ProviderConfig, ToolContext
from toolwire.tools.invoker import InvocationOutcome, InvocationStatus, invoke
from toolwire.tools.registry import Handler, ParameterSchema, ToolDescriptor, ToolRegistry

__all__ = [
    "Handler",
    "InvocationOutcome",
    "InvocationStatus",
    "ParameterSchema",
    "ProviderConfig",
    "ToolContext",
    "ToolDescriptor",
    "ToolRegistry",
    "invoke",
]
