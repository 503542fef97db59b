"""Closed set of JSON-RPC methods the server understands."""

from __future__ import annotations

from enum import Enum
from typing import Any

NOTIFICATION_PREFIX = "notifications/"


class Method(str, Enum):
    """Dispatch branch selected by a request's ``method`` string.

    ``NOTIFICATION`` covers every ``notifications/*`` method other than
    ``notifications/initialized``; ``UNKNOWN`` is the explicit fallthrough.
    """

    INITIALIZE = "initialize"
    TOOLS_LIST = "tools/list"
    TOOLS_INVOKE = "tools/invoke"
    INITIALIZED = "notifications/initialized"
    NOTIFICATION = "notifications/*"
    UNKNOWN = "*"

    @property
    def is_notification(self) -> bool:
        return self in (Method.INITIALIZED, Method.NOTIFICATION)


_EXACT: dict[str, Method] = {
    m.value: m for m in (Method.INITIALIZE, Method.TOOLS_LIST, Method.TOOLS_INVOKE, Method.INITIALIZED)
}


def classify(method: Any) -> Method:
    """Map a raw ``method`` value to its :class:`Method` (exact match first)."""
    if not isinstance(method, str):
        return Method.UNKNOWN
    exact = _EXACT.get(method)
    if exact is not None:
        return exact
    if method.startswith(NOTIFICATION_PREFIX):
        return Method.NOTIFICATION
    return Method.UNKNOWN
