"""Invocation adapter — runs a handler and captures every failure.

No handler fault propagates past :func:`invoke`: the caller always receives
an :class:`InvocationOutcome`. Cancellation of the calling task is the only
thing that escapes.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from toolwire.utils.telemetry import ATTR_TOOL_NAME, ATTR_TOOL_OUTCOME, get_tracer

if TYPE_CHECKING:
    from toolwire.tools.context import ToolContext
    from toolwire.tools.registry import Handler

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


class InvocationStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ABANDONED = "abandoned"


class InvocationOutcome(BaseModel):
    """Result of one handler call."""

    status: InvocationStatus
    result: Any = None
    message: str = ""
    timeout: float | None = None

    @classmethod
    def succeeded(cls, result: Any) -> InvocationOutcome:
        return cls(status=InvocationStatus.SUCCEEDED, result=result)

    @classmethod
    def failed(cls, message: str) -> InvocationOutcome:
        return cls(status=InvocationStatus.FAILED, message=message)

    @classmethod
    def abandoned(cls, timeout: float) -> InvocationOutcome:
        return cls(
            status=InvocationStatus.ABANDONED,
            message=f"abandoned after {timeout}s",
            timeout=timeout,
        )

    @property
    def ok(self) -> bool:
        return self.status == InvocationStatus.SUCCEEDED


async def invoke(
    handler: Handler,
    parameters: dict[str, Any],
    context: ToolContext,
    *,
    timeout: float | None = None,
) -> InvocationOutcome:
    """Call *handler* with *parameters* and wrap whatever happens.

    Coroutine handlers are awaited on the loop; plain callables run on a
    worker thread so they never block other requests.  Either way the wait is
    bounded by *timeout* seconds when one is given.  An abandoned sync
    handler keeps running on its thread; only its result is discarded.
    """
    with _tracer.start_as_current_span("toolwire.tool.invoke") as span:
        span.set_attribute(ATTR_TOOL_NAME, context.tool_name)
        outcome = await _run(handler, parameters, context, timeout)
        span.set_attribute(ATTR_TOOL_OUTCOME, outcome.status.value)

    if outcome.status == InvocationStatus.FAILED:
        logger.error("Tool execution error in %s: %s", context.tool_name, outcome.message)
    elif outcome.status == InvocationStatus.ABANDONED:
        logger.error("Tool %s abandoned after %ss", context.tool_name, timeout)
    return outcome


class _Abandoned(Exception):
    """The bounded wait on a handler expired."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"abandoned after {timeout}s")


async def _run(
    handler: Handler,
    parameters: dict[str, Any],
    context: ToolContext,
    timeout: float | None,
) -> InvocationOutcome:
    try:
        if inspect.iscoroutinefunction(handler):
            pending = handler(parameters, context)
        else:
            pending = asyncio.to_thread(handler, parameters, context)
        result = await _await_bounded(pending, timeout)
        if inspect.isawaitable(result):
            result = await _await_bounded(result, timeout)
    except _Abandoned as exc:
        return InvocationOutcome.abandoned(exc.timeout)
    except asyncio.CancelledError:
        # A cancelled inner future is a handler fault; cancelling the caller is not.
        if _caller_cancelled():
            raise
        return InvocationOutcome.failed("cancelled")
    except Exception as exc:
        return InvocationOutcome.failed(str(exc) or type(exc).__name__)
    return InvocationOutcome.succeeded(result)


def _caller_cancelled() -> bool:
    task = asyncio.current_task()
    return task is not None and task.cancelling() > 0


async def _await_bounded(awaitable: Awaitable[Any], timeout: float | None) -> Any:
    if timeout is None:
        return await awaitable
    deadline = asyncio.timeout(timeout)
    try:
        async with deadline:
            return await awaitable
    except TimeoutError:
        # Only our own deadline means abandoned; a handler's TimeoutError is a failure.
        if deadline.expired():
            raise _Abandoned(timeout) from None
        raise
