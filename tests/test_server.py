"""End-to-end tests for server assembly over the HTTP transport."""

from __future__ import annotations

from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient

from mcpifier.config.models import McpifierSettings
from mcpifier.protocols.models import JsonRpcRequest
from mcpifier.rest.executor import RestExecutor
from mcpifier.server import create_dispatcher, create_http_app


@pytest.fixture
def settings(user_tools) -> McpifierSettings:
    return McpifierSettings.model_validate(
        {
            "serverInfo": {"name": "users-api", "version": "3.1"},
            "instructions": "User management tools.",
            "rest": {"baseAddress": "https://users.example.com/api/", "forwardedHeaders": ["X-Api-Key"]},
            "http": {"route": "/mcp"},
            "tools": [tool.to_dict() for tool in user_tools],
        }
    )


class TestCreateDispatcher:
    async def test_initialize_uses_settings(self, settings, mock_executor) -> None:
        dispatcher = create_dispatcher(settings, mock_executor)
        response = await dispatcher.dispatch(
            JsonRpcRequest.model_validate({"jsonrpc": "2.0", "id": 1, "method": "initialize"})
        )
        assert response.result["serverInfo"] == {"name": "users-api", "version": "3.1"}
        assert response.result["instructions"] == "User management tools."


class TestHttpApp:
    def test_tools_call_round_trip(self, settings) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": 7, "name": "Grace"})

        def fake_create(base_address: str, *, timeout: float = 30.0) -> RestExecutor:
            return RestExecutor(
                httpx.AsyncClient(base_url=base_address, transport=httpx.MockTransport(handler))
            )

        with patch("mcpifier.server.RestExecutor.create", side_effect=fake_create):
            app = create_http_app(settings, settings.rest.base_address)

        with TestClient(app) as client:
            response = client.post(
                "/mcp",
                json={
                    "jsonrpc": "2.0",
                    "id": "call-1",
                    "method": "tools/call",
                    "params": {"name": "get_user", "arguments": {"id": 7}},
                },
                headers={"x-api-key": "k-123", "Authorization": "Bearer not-forwarded"},
            )

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == "call-1"
        assert body["result"]["structuredContent"] == {"id": 7, "name": "Grace"}
        assert str(seen[0].url) == "https://users.example.com/api/users/7"
        assert seen[0].headers["X-Api-Key"] == "k-123"
        assert "Authorization" not in seen[0].headers

    def test_rest_error_surfaces_as_tool_error(self, settings) -> None:
        def fake_create(base_address: str, *, timeout: float = 30.0) -> RestExecutor:
            transport = httpx.MockTransport(lambda r: httpx.Response(503, text="down"))
            return RestExecutor(httpx.AsyncClient(base_url=base_address, transport=transport))

        with patch("mcpifier.server.RestExecutor.create", side_effect=fake_create):
            app = create_http_app(settings, settings.rest.base_address)

        with TestClient(app) as client:
            response = client.post(
                "/mcp",
                json={
                    "jsonrpc": "2.0",
                    "id": 2,
                    "method": "tools/call",
                    "params": {"name": "get_user", "arguments": {"id": 1}},
                },
            )

        result = response.json()["result"]
        assert result["isError"] is True
        assert result["content"][0]["text"] == "REST API returned error code 503: 'down'"
