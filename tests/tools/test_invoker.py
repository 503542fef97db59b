"""Tests for the invocation adapter."""

from __future__ import annotations

import asyncio
import threading
import time
from typing import Any

import pytest

from toolwire.tools.context import ProviderConfig, ToolContext
from toolwire.tools.invoker import InvocationOutcome, InvocationStatus, invoke


def _ctx(name: str = "t") -> ToolContext:
    return ToolContext(tool_name=name, request_id=1, config=ProviderConfig())


class TestInvoke:
    async def test_sync_handler(self) -> None:
        outcome = await invoke(lambda p, c: {"n": p["n"] + 1}, {"n": 1}, _ctx())
        assert outcome.ok
        assert outcome.result == {"n": 2}

    async def test_async_handler(self) -> None:
        async def handler(parameters: dict[str, Any], context: ToolContext) -> str:
            return context.tool_name

        outcome = await invoke(handler, {}, _ctx("named"))
        assert outcome == InvocationOutcome.succeeded("named")

    async def test_none_result_is_success(self) -> None:
        outcome = await invoke(lambda p, c: None, {}, _ctx())
        assert outcome.status == InvocationStatus.SUCCEEDED
        assert outcome.result is None

    async def test_sync_exception_captured(self) -> None:
        def handler(parameters: dict[str, Any], context: ToolContext) -> None:
            raise ValueError("Bucket name is required")

        outcome = await invoke(handler, {}, _ctx())
        assert outcome.status == InvocationStatus.FAILED
        assert outcome.message == "Bucket name is required"

    async def test_async_exception_captured(self) -> None:
        async def handler(parameters: dict[str, Any], context: ToolContext) -> None:
            raise KeyError("missing")

        outcome = await invoke(handler, {}, _ctx())
        assert outcome.status == InvocationStatus.FAILED
        assert "missing" in outcome.message

    async def test_empty_message_uses_type_name(self) -> None:
        async def handler(parameters: dict[str, Any], context: ToolContext) -> None:
            raise RuntimeError

        outcome = await invoke(handler, {}, _ctx())
        assert outcome.message == "RuntimeError"

    async def test_timeout_abandons(self) -> None:
        async def handler(parameters: dict[str, Any], context: ToolContext) -> None:
            await asyncio.sleep(5)

        outcome = await invoke(handler, {}, _ctx(), timeout=0.01)
        assert outcome.status == InvocationStatus.ABANDONED
        assert outcome.timeout == 0.01
        assert outcome.message == "abandoned after 0.01s"

    async def test_handler_timeout_error_is_a_failure(self) -> None:
        async def handler(parameters: dict[str, Any], context: ToolContext) -> None:
            raise TimeoutError("upstream timed out")

        outcome = await invoke(handler, {}, _ctx(), timeout=5)
        assert outcome.status == InvocationStatus.FAILED
        assert outcome.message == "upstream timed out"

    async def test_fast_handler_within_timeout(self) -> None:
        async def handler(parameters: dict[str, Any], context: ToolContext) -> str:
            return "quick"

        outcome = await invoke(handler, {}, _ctx(), timeout=5)
        assert outcome.ok

    async def test_cancellation_propagates(self) -> None:
        started = asyncio.Event()

        async def handler(parameters: dict[str, Any], context: ToolContext) -> None:
            started.set()
            await asyncio.sleep(5)

        task = asyncio.create_task(invoke(handler, {}, _ctx()))
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    async def test_cancelled_inner_future_is_a_failure(self) -> None:
        async def handler(parameters: dict[str, Any], context: ToolContext) -> None:
            inner = asyncio.get_running_loop().create_future()
            inner.cancel()
            await inner

        outcome = await invoke(handler, {}, _ctx())
        assert outcome.status == InvocationStatus.FAILED
        assert outcome.message == "cancelled"

    async def test_cancelled_inner_future_with_timeout_is_a_failure(self) -> None:
        async def handler(parameters: dict[str, Any], context: ToolContext) -> None:
            inner = asyncio.get_running_loop().create_future()
            inner.cancel()
            await inner

        outcome = await invoke(handler, {}, _ctx(), timeout=5)
        assert outcome.status == InvocationStatus.FAILED

    async def test_slow_sync_handler_is_abandoned(self) -> None:
        def handler(parameters: dict[str, Any], context: ToolContext) -> str:
            time.sleep(0.3)
            return "late"

        outcome = await invoke(handler, {}, _ctx(), timeout=0.05)
        assert outcome.status == InvocationStatus.ABANDONED
        assert outcome.message == "abandoned after 0.05s"

    async def test_sync_handler_runs_off_the_loop(self) -> None:
        loop_thread = threading.get_ident()

        def handler(parameters: dict[str, Any], context: ToolContext) -> int:
            return threading.get_ident()

        outcome = await invoke(handler, {}, _ctx())
        assert outcome.ok
        assert outcome.result != loop_thread


class TestToolContext:
    def test_config_shared_by_reference(self) -> None:
        config = ProviderConfig()
        first = ToolContext(tool_name="a", config=config)
        second = ToolContext(tool_name="b", config=config)
        first.config.region = "eu-central-1"
        assert second.config.region == "eu-central-1"

    def test_region_must_be_string(self) -> None:
        config = ProviderConfig()
        with pytest.raises(ValueError):
            config.region = 5  # type: ignore[assignment]
