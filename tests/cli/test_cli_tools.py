"""Tests for ``toolwire tools`` CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from toolwire.cli import main


class TestToolsList:
    def test_table(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["tools", "list", "--no-aws"])

        assert result.exit_code == 0
        assert "Tool Catalog" in result.output
        assert "ping" in result.output

    def test_json_matches_tools_list_payload(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["tools", "list", "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.output)
        names = [t["name"] for t in payload["tools"]]
        assert names[-1] == "ping"
        assert "aws.dynamodb.describeTable" in names

    def test_config_error(self, tmp_path: Path) -> None:
        config = tmp_path / "bad.yaml"
        config.write_text("concurrency: parallel\n")

        runner = CliRunner()
        result = runner.invoke(main, ["tools", "list", "--config", str(config)])

        assert result.exit_code == 1
        assert "Configuration error" in result.output


class TestToolsInvoke:
    def test_ping(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["tools", "invoke", "ping"])

        assert result.exit_code == 0
        assert json.loads(result.output) == {"jsonrpc": "2.0", "id": 1, "result": {"result": "pong"}}

    def test_unknown_tool(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["tools", "invoke", "nope"])

        assert result.exit_code == 1
        assert "Tool 'nope' not found" in result.output

    def test_handler_error(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["tools", "invoke", "aws.s3.listObjects", "--params", "{}"])

        assert result.exit_code == 1
        assert "Bucket name is required" in result.output

    def test_invalid_params(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, ["tools", "invoke", "ping", "-p", "{bad"])

        assert result.exit_code == 1
        assert "Invalid --params JSON" in result.output

    def test_missing_response_exits_nonzero(self) -> None:
        runner = CliRunner()
        with patch("toolwire.protocol.dispatcher.Dispatcher.dispatch", new=AsyncMock(return_value=None)):
            result = runner.invoke(main, ["tools", "invoke", "ping"])

        assert result.exit_code == 1
        assert "No response for tool 'ping'" in result.output
