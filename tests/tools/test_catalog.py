"""Tests for the static tool catalog."""

from __future__ import annotations

import pytest

from toolwire.tools.catalog import KNOWN_PROVIDERS, PING, build_registry, ping
from toolwire.tools.context import ProviderConfig, ToolContext


class TestPing:
    async def test_pong(self) -> None:
        context = ToolContext(tool_name="ping", config=ProviderConfig())
        assert await ping({}, context) == {"result": "pong"}
        assert await ping({"ignored": True}, context) == {"result": "pong"}

    def test_descriptor(self) -> None:
        assert PING.name == "ping"
        assert PING.parameters.required == ()


class TestBuildRegistry:
    def test_ping_only(self) -> None:
        registry = build_registry([])
        assert [d.name for d in registry.list()] == ["ping"]
        assert registry.frozen

    def test_full_catalog(self) -> None:
        registry = build_registry(KNOWN_PROVIDERS)
        names = [d.name for d in registry.list()]
        assert names[-1] == "ping"
        assert names[0] == "aws.ec2.describeInstances"
        assert len(names) == 22
        assert len(set(names)) == len(names)
        assert "aws.s3.listObjects" in names
        assert "aws.eks.listClusters" in names

    def test_required_parameters(self) -> None:
        registry = build_registry()
        required = {d.name: d.parameters.required for d in registry.list() if d.parameters.required}
        assert required == {
            "aws.s3.listObjects": ("bucket",),
            "aws.lambda.getFunctionConfiguration": ("functionName",),
            "aws.dynamodb.describeTable": ("tableName",),
            "aws.cloudwatch.getMetricStatistics": ("namespace", "metricName"),
        }

    def test_unknown_provider(self) -> None:
        with pytest.raises(ValueError, match="Unknown provider"):
            build_registry(["gcp"])
