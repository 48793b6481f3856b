"""Shared fixtures for mcpifier tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from mcpifier.protocols.models import McpToolDefinition, RestConfiguration, ToolMapping
from mcpifier.rest.executor import RestResult

ToolFactory = Callable[..., ToolMapping]


def _make_tool(
    name: str = "get_user",
    *,
    method: str = "GET",
    path: str = "/users/{id}",
    query: str | None = None,
    body: str | None = None,
    input_schema: dict[str, Any] | None = None,
    description: str | None = None,
) -> ToolMapping:
    return ToolMapping(
        mcp=McpToolDefinition(
            name=name,
            description=description,
            input_schema=input_schema or {"type": "object"},
        ),
        rest=RestConfiguration(method=method, path=path, query=query, body=body),
    )


@pytest.fixture
def make_tool() -> ToolFactory:
    return _make_tool


@pytest.fixture
def user_tools() -> list[ToolMapping]:
    return [
        _make_tool(
            "get_user",
            description="Get a user by id",
            input_schema={
                "type": "object",
                "properties": {"id": {"type": "integer"}},
                "required": ["id"],
            },
        ),
        _make_tool(
            "create_user",
            method="POST",
            path="/users",
            body="{requestBody}",
            input_schema={
                "type": "object",
                "properties": {"requestBody": {"type": "object"}},
                "required": ["requestBody"],
            },
        ),
        _make_tool(
            "search_users",
            path="/users",
            query="name={name}&limit={limit}",
            input_schema={
                "type": "object",
                "properties": {"name": {"type": "string"}, "limit": {"type": "integer"}},
            },
        ),
    ]


@pytest.fixture
def mock_executor() -> MagicMock:
    executor = MagicMock()
    executor.execute = AsyncMock(return_value=RestResult(True, 200, '{"id":1,"name":"Ada"}'))
    return executor
