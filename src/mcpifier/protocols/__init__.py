"""Protocol layer — JSON-RPC messages, MCP handlers, and the dispatcher."""

from mcpifier.protocols.dispatcher import JsonRpcDispatcher
from mcpifier.protocols.errors import (
    ConfigurationError,
    ConversionError,
    McpifierError,
    RpcParamsError,
)
from mcpifier.protocols.handlers import McpMethod, RpcHandler
from mcpifier.protocols.models import (
    ErrorCode,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    McpToolDefinition,
    RestConfiguration,
    ServerInfo,
    ToolMapping,
)
from mcpifier.protocols.registry import ToolRegistry, merge_tools
from mcpifier.protocols.schema import Schema

__all__ = [
    "ConfigurationError",
    "ConversionError",
    "ErrorCode",
    "JsonRpcDispatcher",
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "McpMethod",
    "McpToolDefinition",
    "McpifierError",
    "RestConfiguration",
    "RpcHandler",
    "RpcParamsError",
    "Schema",
    "ServerInfo",
    "ToolMapping",
    "ToolRegistry",
    "merge_tools",
]
