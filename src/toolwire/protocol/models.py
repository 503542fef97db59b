"""JSON-RPC 2.0 envelopes exchanged with the client.

Inbound requests are parsed leniently so the dispatcher can answer malformed
envelopes with the right error code instead of failing validation.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, Field

JSONRPC_VERSION = "2.0"


class ErrorCode(IntEnum):
    """Error codes from the JSON-RPC reserved ranges."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INTERNAL_ERROR = -32603
    TOOL_EXECUTION_ERROR = -32000


# ---------------------------------------------------------------------------
# Inbound
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """One inbound message: a request when ``id`` is set, else a notification."""

    model_config = {"extra": "allow"}

    jsonrpc: Any = None
    id: Any = None
    method: Any = None
    params: Any = None

    @property
    def is_notification(self) -> bool:
        return self.id is None

    @property
    def params_dict(self) -> dict[str, Any]:
        """``params`` when it is an object, otherwise an empty dict."""
        return self.params if isinstance(self.params, dict) else {}


# ---------------------------------------------------------------------------
# Outbound
# ---------------------------------------------------------------------------


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None


class JsonRpcSuccess(BaseModel):
    """A successful response."""

    jsonrpc: str = JSONRPC_VERSION
    id: Any = None
    result: Any = None


class JsonRpcFailure(BaseModel):
    """An error response. ``id`` is null when it could not be recovered."""

    jsonrpc: str = JSONRPC_VERSION
    id: Any = None
    error: JsonRpcError

    @classmethod
    def build(cls, request_id: Any, code: int, message: str) -> JsonRpcFailure:
        return cls(id=request_id, error=JsonRpcError(code=int(code), message=message))


class JsonRpcNotification(BaseModel):
    """A server-to-client notification; never carries an ``id``."""

    jsonrpc: str = JSONRPC_VERSION
    method: str
    params: dict[str, Any] = Field(default_factory=dict)


JsonRpcResponse = JsonRpcSuccess | JsonRpcFailure


# ---------------------------------------------------------------------------
# Handshake and tool listing payloads
# ---------------------------------------------------------------------------


class ServerInfo(BaseModel):
    """Identity reported in the ``initialize`` handshake.

    ``protocol_version`` is only used when the client does not send one.
    """

    name: str = "toolwire"
    version: str = "0.1.0"
    protocol_version: str = "2024-11-05"


class ToolListing(BaseModel):
    """A tool definition as returned by ``tools/list``."""

    model_config = {"populate_by_name": True}

    name: str
    description: str = ""
    input_schema: dict[str, Any] = Field(default_factory=dict, alias="inputSchema")
