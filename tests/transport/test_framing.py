"""Tests for shared request framing."""

from __future__ import annotations

import json

import pytest

from mcpifier.protocols.models import JsonRpcResponse
from mcpifier.transport.framing import decode_request, encode_response


class TestDecodeRequest:
    def test_valid_request(self) -> None:
        request, error = decode_request('{"jsonrpc":"2.0","method":"ping","id":1}')
        assert error is None
        assert request is not None
        assert request.method == "ping"

    def test_accepts_bytes(self) -> None:
        request, error = decode_request(b'{"jsonrpc":"2.0","method":"ping","id":1}')
        assert error is None
        assert request is not None

    @pytest.mark.parametrize("payload", ["", " ", "null", "{not json", "[1,2]", '"text"', "42"])
    def test_parse_error(self, payload: str) -> None:
        request, error = decode_request(payload)
        assert request is None
        assert error is not None
        assert error.to_dict() == {
            "jsonrpc": "2.0",
            "id": None,
            "error": {"code": -32700, "message": "Parse error"},
        }

    def test_invalid_request_echoes_id(self) -> None:
        request, error = decode_request('{"jsonrpc":"2.0","method":123,"id":7}')
        assert request is None
        assert error is not None
        assert error.id == 7
        assert error.error is not None
        assert error.error.code == -32600

    def test_missing_method_without_id(self) -> None:
        _, error = decode_request('{"jsonrpc":"2.0"}')
        assert error is not None
        assert error.id is None
        assert error.error.code == -32600  # type: ignore[union-attr]


class TestEncodeResponse:
    def test_single_line_compact(self) -> None:
        line = encode_response(JsonRpcResponse.success(1, {"text": "a\nb", "name": "café"}))
        assert "\n" not in line
        assert "café" in line
        assert json.loads(line) == {"jsonrpc": "2.0", "id": 1, "result": {"text": "a\nb", "name": "café"}}
