"""Protocol layer — JSON-RPC codec, dispatcher and stdio transport loop."""

from toolwire.protocol.dispatcher import Dispatcher
from toolwire.protocol.errors import (
    DuplicateToolError,
    ParseError,
    ProtocolError,
    RegistryError,
    RegistryFrozenError,
    ToolNotFoundError,
)
from toolwire.protocol.methods import Method, classify
from toolwire.protocol.models import (
    ErrorCode,
    JsonRpcError,
    JsonRpcFailure,
    JsonRpcNotification,
    JsonRpcRequest,
    JsonRpcSuccess,
    ServerInfo,
    ToolListing,
)
from toolwire.protocol.server import Concurrency, Server
from toolwire.protocol.transport import LineTransport, StdioTransport

__all__ = [
    "Concurrency",
    "Dispatcher",
    "DuplicateToolError",
    "ErrorCode",
    "JsonRpcError",
    "JsonRpcFailure",
    "JsonRpcNotification",
    "JsonRpcRequest",
    "JsonRpcSuccess",
    "LineTransport",
    "Method",
    "ParseError",
    "ProtocolError",
    "RegistryError",
    "RegistryFrozenError",
    "Server",
    "ServerInfo",
    "StdioTransport",
    "ToolListing",
    "ToolNotFoundError",
    "classify",
]
