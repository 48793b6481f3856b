"""RPC handlers — one per supported MCP method.

Every handler satisfies :class:`RpcHandler`: it receives a decoded
:class:`JsonRpcRequest` and returns a :class:`JsonRpcResponse`.  Handlers may
raise :class:`ValueError` (including pydantic ``ValidationError``) for
malformed parameters; the dispatcher turns that into ``Invalid params``.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel

from mcpifier.protocols.context import get_forwarded_headers
from mcpifier.protocols.errors import RpcParamsError
from mcpifier.protocols.models import (
    JsonRpcRequest,
    JsonRpcResponse,
    McpInitializeParams,
    McpInitializeResult,
    McpTextContent,
    McpToolsCallParams,
    McpToolsCallResult,
    McpToolsListParams,
    ServerInfo,
)

if TYPE_CHECKING:
    from mcpifier.protocols.registry import ToolRegistry
    from mcpifier.rest.executor import RestExecutor

logger = logging.getLogger(__name__)

_ParamsT = TypeVar("_ParamsT", bound=BaseModel)

DEFAULT_PROTOCOL_VERSION = "2025-06-18"
SUPPORTED_PROTOCOL_VERSIONS = frozenset({"2024-11-05", "2025-03-26", "2025-06-18"})


class McpMethod(str, Enum):
    """The fixed set of JSON-RPC methods this server answers."""

    PING = "ping"
    INITIALIZE = "initialize"
    NOTIFICATIONS_INITIALIZED = "notifications/initialized"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"


@runtime_checkable
class RpcHandler(Protocol):
    """Handles one JSON-RPC method."""

    method: McpMethod

    async def handle(self, request: JsonRpcRequest) -> JsonRpcResponse: ...


class PingHandler:
    """``ping`` — answers with an empty result object."""

    method = McpMethod.PING

    async def handle(self, request: JsonRpcRequest) -> JsonRpcResponse:
        return JsonRpcResponse.success(request.id, {})


class InitializedNotificationHandler:
    """``notifications/initialized`` — acknowledged with no response."""

    method = McpMethod.NOTIFICATIONS_INITIALIZED

    async def handle(self, request: JsonRpcRequest) -> JsonRpcResponse:
        return JsonRpcResponse.empty()


class InitializeHandler:
    """``initialize`` — reports protocol version, capabilities and server info.

    The client's requested version is echoed when supported; otherwise the
    configured version is offered.  Handshake ordering is not enforced.
    """

    method = McpMethod.INITIALIZE

    def __init__(
        self,
        server_info: ServerInfo | None = None,
        protocol_version: str = DEFAULT_PROTOCOL_VERSION,
        instructions: str | None = None,
    ) -> None:
        self._server_info = server_info or ServerInfo()
        self._protocol_version = protocol_version
        self._instructions = instructions

    async def handle(self, request: JsonRpcRequest) -> JsonRpcResponse:
        params = _parse_params(request, McpInitializeParams)

        version = self._protocol_version
        if params.protocol_version in SUPPORTED_PROTOCOL_VERSIONS:
            version = params.protocol_version

        client = (params.client_info or {}).get("name", "unknown")
        logger.info("Initializing session for client %s with protocol %s", client, version)

        result = McpInitializeResult(
            protocol_version=version,
            server_info=self._server_info,
            instructions=self._instructions,
        )
        return JsonRpcResponse.success(
            request.id, result.model_dump(by_alias=True, exclude_none=True)
        )


class ToolsListHandler:
    """``tools/list`` — every registered tool, in registry order."""

    method = McpMethod.TOOLS_LIST

    def __init__(self, registry: ToolRegistry) -> None:
        self._registry = registry

    async def handle(self, request: JsonRpcRequest) -> JsonRpcResponse:
        _parse_params(request, McpToolsListParams)
        tools = [tool.mcp.to_dict() for tool in self._registry.values()]
        return JsonRpcResponse.success(request.id, {"tools": tools})


class ToolsCallHandler:
    """``tools/call`` — validates arguments and executes the mapped REST call.

    A failing REST call is still a successful JSON-RPC response: the failure
    is reported in the result with ``isError: true``.
    """

    method = McpMethod.TOOLS_CALL

    def __init__(self, registry: ToolRegistry, executor: RestExecutor) -> None:
        self._registry = registry
        self._executor = executor

    async def handle(self, request: JsonRpcRequest) -> JsonRpcResponse:
        params = _parse_params(request, McpToolsCallParams)

        tool = self._registry.get(params.name)
        if tool is None:
            logger.warning("Tool %s not found", params.name)
            return JsonRpcResponse.invalid_params(request.id, f"Tool '{params.name}' not found")

        is_valid, message = tool.mcp.input.validate(params.arguments)
        if not is_valid:
            logger.warning("Invalid arguments for tool %s: %s", params.name, message)
            return JsonRpcResponse.invalid_params(request.id, message or "Validation failed")

        outcome = await self._executor.execute(tool, params.arguments, get_forwarded_headers())

        if outcome.success:
            result = McpToolsCallResult(
                content=[McpTextContent(text=outcome.body)],
                structured_content=_structured(outcome.body),
                is_error=False,
            )
        else:
            text = f"REST API returned error code {outcome.status_code}: '{outcome.body}'"
            result = McpToolsCallResult(content=[McpTextContent(text=text)], is_error=True)

        return JsonRpcResponse.success(request.id, result.to_dict())


def _structured(body: str) -> Any:
    """Parse *body* as JSON; only objects and arrays count as structured content."""
    try:
        parsed = json.loads(body)
    except ValueError:
        return None
    return parsed if isinstance(parsed, (dict, list)) else None


def _parse_params(request: JsonRpcRequest, model: type[_ParamsT]) -> _ParamsT:
    """Validate ``params`` as *model*; absent params count as ``{}``."""
    params = {} if request.params is None else request.params
    if not isinstance(params, dict):
        raise RpcParamsError(f"Params of {request.method} must be an object")
    return model.model_validate(params)
