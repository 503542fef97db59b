"""Dispatcher — the per-request JSON-RPC state machine.

Each decoded line is handled independently:

1. **Envelope validation** — the document must be an object whose
   ``jsonrpc`` member is ``"2.0"``.
2. **Classification** — :func:`~toolwire.protocol.methods.classify` maps the
   method name onto the closed :class:`~toolwire.protocol.methods.Method`
   set, and the matching route builds the response.
3. **Fault containment** — anything unexpected becomes an ``Internal error``
   response (or a logged diagnostic for notifications).

A request without an ``id`` never produces a response.  ``tools/invoke``
sent as a notification still runs its handler; only the reply is dropped.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from toolwire.protocol.errors import ToolNotFoundError
from toolwire.protocol.methods import Method, classify
from toolwire.protocol.models import (
    JSONRPC_VERSION,
    ErrorCode,
    JsonRpcFailure,
    JsonRpcRequest,
    JsonRpcResponse,
    JsonRpcSuccess,
    ServerInfo,
)
from toolwire.tools.context import ProviderConfig, ToolContext
from toolwire.tools.invoker import InvocationStatus, invoke
from toolwire.utils.telemetry import (
    ATTR_RPC_ERROR_CODE,
    ATTR_RPC_ID,
    ATTR_RPC_METHOD,
    get_tracer,
)

if TYPE_CHECKING:
    from toolwire.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

Route = Callable[[JsonRpcRequest], Awaitable["JsonRpcResponse | None"]]


class Dispatcher:
    """Routes decoded JSON-RPC messages to the handshake, catalog and tools.

    Usage::

        dispatcher = Dispatcher(registry, server_info=ServerInfo())
        response = await dispatcher.dispatch({"jsonrpc": "2.0", "id": 1,
                                              "method": "tools/list"})
    """

    def __init__(
        self,
        registry: ToolRegistry,
        *,
        server_info: ServerInfo | None = None,
        provider_config: ProviderConfig | None = None,
        invoke_timeout: float | None = None,
    ) -> None:
        self._registry = registry
        self._server_info = server_info or ServerInfo()
        self._provider_config = provider_config or ProviderConfig()
        self._invoke_timeout = invoke_timeout
        self._routes: dict[Method, Route] = {
            Method.INITIALIZE: self._initialize,
            Method.TOOLS_LIST: self._tools_list,
            Method.TOOLS_INVOKE: self._tools_invoke,
            Method.INITIALIZED: self._notification,
            Method.NOTIFICATION: self._notification,
            Method.UNKNOWN: self._method_not_found,
        }
        unrouted = [m.value for m in Method if m not in self._routes]
        if unrouted:
            msg = f"No route for method(s): {', '.join(unrouted)}"
            raise RuntimeError(msg)

    @property
    def provider_config(self) -> ProviderConfig:
        return self._provider_config

    async def dispatch(self, message: Any) -> JsonRpcResponse | None:
        """Handle one decoded message; return the response or ``None``."""
        request_id = message.get("id") if isinstance(message, dict) else None
        method = message.get("method") if isinstance(message, dict) else None

        with _tracer.start_as_current_span("toolwire.dispatch") as span:
            span.set_attribute(ATTR_RPC_METHOD, str(method))
            if request_id is not None:
                span.set_attribute(ATTR_RPC_ID, str(request_id))
            try:
                response = await self._dispatch(message)
            except Exception:
                logger.exception("Error processing request: %s", message)
                if request_id is None:
                    return None
                response = JsonRpcFailure.build(
                    request_id, ErrorCode.INTERNAL_ERROR, "Internal error"
                )
            if isinstance(response, JsonRpcFailure):
                span.set_attribute(ATTR_RPC_ERROR_CODE, response.error.code)
            return response

    async def _dispatch(self, message: Any) -> JsonRpcResponse | None:
        if not isinstance(message, dict):
            logger.error("Invalid Request: expected a JSON object, got %s", type(message).__name__)
            return JsonRpcFailure.build(
                None, ErrorCode.INVALID_REQUEST, "Invalid Request: expected a JSON object"
            )

        request = JsonRpcRequest.model_validate(message)
        logger.info("Received request: %s", message)

        if request.jsonrpc != JSONRPC_VERSION:
            return self._error(request, ErrorCode.INVALID_REQUEST, "Invalid Request: Not JSON-RPC 2.0")

        route = self._routes[classify(request.method)]
        return await route(request)

    # ------------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------------

    async def _initialize(self, request: JsonRpcRequest) -> JsonRpcResponse | None:
        requested = request.params_dict.get("protocolVersion")
        return self._success(
            request,
            {
                "protocolVersion": requested if requested is not None else self._server_info.protocol_version,
                "capabilities": {"tools": {}},
                "serverInfo": {
                    "name": self._server_info.name,
                    "version": self._server_info.version,
                },
            },
        )

    async def _tools_list(self, request: JsonRpcRequest) -> JsonRpcResponse | None:
        tools = [d.to_listing().model_dump(by_alias=True) for d in self._registry.list()]
        return self._success(request, {"tools": tools})

    async def _tools_invoke(self, request: JsonRpcRequest) -> JsonRpcResponse | None:
        params = request.params_dict
        name = params.get("name")
        handler = self._registry.lookup(name)
        if handler is None:
            return self._error(request, ErrorCode.METHOD_NOT_FOUND, str(ToolNotFoundError(name)))

        parameters = params.get("parameters")
        if parameters is None:
            parameters = {}
        if not isinstance(parameters, dict):
            return self._error(
                request,
                ErrorCode.TOOL_EXECUTION_ERROR,
                "Tool execution error: parameters must be an object",
            )

        context = ToolContext(tool_name=name, request_id=request.id, config=self._provider_config)
        outcome = await invoke(handler, parameters, context, timeout=self._invoke_timeout)
        if outcome.status == InvocationStatus.SUCCEEDED:
            return self._success(request, outcome.result)
        return self._error(
            request, ErrorCode.TOOL_EXECUTION_ERROR, f"Tool execution error: {outcome.message}"
        )

    async def _notification(self, request: JsonRpcRequest) -> JsonRpcResponse | None:
        logger.info("Received notification: %s", request.method)
        return None

    async def _method_not_found(self, request: JsonRpcRequest) -> JsonRpcResponse | None:
        return self._error(request, ErrorCode.METHOD_NOT_FOUND, "Method not found")

    # ------------------------------------------------------------------
    # Replies
    # ------------------------------------------------------------------

    @staticmethod
    def _success(request: JsonRpcRequest, result: Any) -> JsonRpcSuccess | None:
        if request.is_notification:
            logger.info("Dropping result for notification %s", request.method)
            return None
        return JsonRpcSuccess(id=request.id, result=result)

    @staticmethod
    def _error(request: JsonRpcRequest, code: ErrorCode, message: str) -> JsonRpcFailure | None:
        if request.is_notification:
            logger.error("Dropping error for notification %s: %s", request.method, message)
            return None
        logger.error("Request %s failed (%d): %s", request.id, code, message)
        return JsonRpcFailure.build(request.id, code, message)
