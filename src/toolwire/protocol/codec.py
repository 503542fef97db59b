"""Message codec — one JSON document per line in, one per line out.

Parsing is purely syntactic: JSON-RPC semantics (version marker, method
presence) are checked by the dispatcher.
"""

from __future__ import annotations

import json
from typing import Any

from toolwire.protocol.errors import ParseError
from toolwire.protocol.models import (
    JsonRpcFailure,
    JsonRpcNotification,
    JsonRpcSuccess,
)


def parse_line(text: str) -> Any:
    """Decode one line of input into a JSON value.

    Raises:
        ParseError: If *text* is not well-formed JSON.
    """
    try:
        return json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ParseError(str(exc)) from exc


def encode(envelope: JsonRpcSuccess | JsonRpcFailure | JsonRpcNotification) -> str:
    """Serialize an envelope to a single line (no trailing newline).

    Raises:
        ValueError: For values with no JSON form, such as NaN.
    """
    payload = envelope.model_dump()
    if isinstance(envelope, JsonRpcFailure) and envelope.error.data is None:
        payload["error"].pop("data")
    return json.dumps(payload, default=_json_default, separators=(",", ":"), allow_nan=False)


def encode_success(request_id: Any, result: Any) -> str:
    return encode(JsonRpcSuccess(id=request_id, result=result))


def encode_error(request_id: Any, code: int, message: str) -> str:
    return encode(JsonRpcFailure.build(request_id, code, message))


def encode_notification(method: str, params: dict[str, Any] | None = None) -> str:
    return encode(JsonRpcNotification(method=method, params=params or {}))


def _json_default(value: Any) -> Any:
    # SDK payloads carry datetimes, Decimals and the like.
    isoformat = getattr(value, "isoformat", None)
    if callable(isoformat):
        return isoformat()
    return str(value)
