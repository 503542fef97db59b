"""Tests for the line codec."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from decimal import Decimal

import pytest

from toolwire.protocol import codec
from toolwire.protocol.errors import ParseError
from toolwire.protocol.models import ErrorCode, JsonRpcFailure, JsonRpcSuccess


class TestParseLine:
    def test_parses_object(self) -> None:
        message = codec.parse_line('{"jsonrpc":"2.0","id":1,"method":"tools/list"}')
        assert message == {"jsonrpc": "2.0", "id": 1, "method": "tools/list"}

    def test_parses_non_object_documents(self) -> None:
        # Syntax only: JSON-RPC semantics are the dispatcher's job.
        assert codec.parse_line("[1, 2]") == [1, 2]
        assert codec.parse_line('"text"') == "text"

    @pytest.mark.parametrize("line", ["{bad json", "", "{'single': 'quotes'}", '{"a": 1} trailing'])
    def test_malformed_raises(self, line: str) -> None:
        with pytest.raises(ParseError, match="Parse error"):
            codec.parse_line(line)


class TestEncode:
    def test_success_is_compact_single_line(self) -> None:
        text = codec.encode_success(2, {"result": "pong"})
        assert text == '{"jsonrpc":"2.0","id":2,"result":{"result":"pong"}}'

    def test_success_with_null_result_keeps_key(self) -> None:
        assert json.loads(codec.encode_success("a", None)) == {"jsonrpc": "2.0", "id": "a", "result": None}

    def test_error_omits_empty_data(self) -> None:
        text = codec.encode_error(None, ErrorCode.PARSE_ERROR, "Parse error")
        assert text == '{"jsonrpc":"2.0","id":null,"error":{"code":-32700,"message":"Parse error"}}'

    def test_error_keeps_data_when_set(self) -> None:
        failure = JsonRpcFailure.build(3, ErrorCode.INTERNAL_ERROR, "Internal error")
        failure.error.data = {"hint": "x"}
        assert json.loads(codec.encode(failure))["error"]["data"] == {"hint": "x"}

    def test_notification_has_no_id(self) -> None:
        payload = json.loads(codec.encode_notification("notifications/ready"))
        assert payload == {"jsonrpc": "2.0", "method": "notifications/ready", "params": {}}

    def test_embedded_newlines_are_escaped(self) -> None:
        text = codec.encode_success(1, {"text": "line one\nline two"})
        assert "\n" not in text
        assert json.loads(text)["result"]["text"] == "line one\nline two"

    def test_sdk_values_are_serialized(self) -> None:
        when = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
        text = codec.encode(JsonRpcSuccess(id=1, result={"at": when, "size": Decimal("1.5")}))
        result = json.loads(text)["result"]
        assert result == {"at": "2024-01-02T03:04:05+00:00", "size": "1.5"}
