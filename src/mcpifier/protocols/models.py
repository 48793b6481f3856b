"""Protocol models — JSON-RPC 2.0 messages, MCP payloads, and tool mappings.

Implements the message format used by the Model Context Protocol for the
``initialize``, ``tools/list`` and ``tools/call`` methods, plus the
declarative :class:`ToolMapping` that pairs an MCP tool with its REST call.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, StrictStr

from mcpifier import __version__
from mcpifier.protocols.schema import Schema

JSONRPC_VERSION = "2.0"

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class ErrorCode(IntEnum):
    """JSON-RPC 2.0 error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request message.

    ``jsonrpc`` is optional here so that a request missing it still decodes
    and can be rejected by the dispatcher with its ``id`` echoed.  A request
    without an ``id`` member is a notification; ``"id": null`` is not.
    """

    jsonrpc: StrictStr | None = None
    method: StrictStr
    id: Any = None
    params: Any = None

    @property
    def is_notification(self) -> bool:
        return "id" not in self.model_fields_set


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response message.

    Holds exactly one of ``result`` and ``error``, or neither for the empty
    response that answers a notification.
    """

    jsonrpc: str = JSONRPC_VERSION
    id: Any = None
    result: Any = None
    error: JsonRpcError | None = None

    @property
    def is_empty(self) -> bool:
        return self.result is None and self.error is None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        """Wire form: ``id`` is always present, ``result``/``error`` only when set."""
        message: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            message["error"] = self.error.to_dict()
        else:
            message["result"] = self.result
        return message

    # -- factories ----------------------------------------------------------

    @classmethod
    def empty(cls) -> JsonRpcResponse:
        return cls()

    @classmethod
    def success(cls, id: Any, result: Any = None) -> JsonRpcResponse:  # noqa: A002
        return cls(id=id, result={} if result is None else result)

    @classmethod
    def failure(
        cls,
        id: Any,  # noqa: A002
        code: int,
        message: str,
        data: Any = None,
    ) -> JsonRpcResponse:
        return cls(id=id, error=JsonRpcError(code=code, message=message, data=data))

    @classmethod
    def parse_error(cls) -> JsonRpcResponse:
        return cls.failure(None, ErrorCode.PARSE_ERROR, "Parse error")

    @classmethod
    def invalid_request(cls, id: Any = None) -> JsonRpcResponse:  # noqa: A002
        return cls.failure(id, ErrorCode.INVALID_REQUEST, "Invalid Request")

    @classmethod
    def method_not_found(cls, id: Any, method: str) -> JsonRpcResponse:  # noqa: A002
        return cls.failure(id, ErrorCode.METHOD_NOT_FOUND, "Method not found", method)

    @classmethod
    def invalid_params(cls, id: Any, data: Any = None) -> JsonRpcResponse:  # noqa: A002
        return cls.failure(id, ErrorCode.INVALID_PARAMS, "Invalid params", data)

    @classmethod
    def internal_error(cls, id: Any, data: Any = None) -> JsonRpcResponse:  # noqa: A002
        return cls.failure(id, ErrorCode.INTERNAL_ERROR, "Internal error", data)


# ---------------------------------------------------------------------------
# Tool mappings
# ---------------------------------------------------------------------------


class McpToolDefinition(BaseModel):
    """An MCP tool as advertised by ``tools/list``.

    ``input_schema``/``output_schema`` hold the wire-exact JSON; the matching
    :class:`Schema` cells compile them for validation on first use.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    title: str | None = None
    description: str | None = None
    input_schema: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object"}, alias="inputSchema"
    )
    output_schema: dict[str, Any] | None = Field(default=None, alias="outputSchema")

    _input: Schema = PrivateAttr()
    _output: Schema | None = PrivateAttr(default=None)

    def model_post_init(self, __context: Any) -> None:
        self._input = Schema(self.input_schema)
        if self.output_schema is not None:
            self._output = Schema(self.output_schema)

    @property
    def input(self) -> Schema:
        return self._input

    @property
    def output(self) -> Schema | None:
        return self._output

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class RestConfiguration(BaseModel):
    """The REST call template for a tool: method, path, query and body."""

    model_config = ConfigDict(frozen=True)

    method: str = "GET"
    path: str
    query: str | None = None
    body: str | None = None


class ToolMapping(BaseModel):
    """An MCP tool definition paired with its REST call template."""

    model_config = ConfigDict(frozen=True)

    mcp: McpToolDefinition
    rest: RestConfiguration

    @property
    def name(self) -> str:
        return self.mcp.name

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# MCP-specific payloads
# ---------------------------------------------------------------------------


class ServerInfo(BaseModel):
    """Implementation info reported by ``initialize``."""

    name: str = "mcpifier"
    version: str = __version__


class McpInitializeParams(BaseModel):
    """Parameters of an ``initialize`` request."""

    model_config = ConfigDict(populate_by_name=True)

    protocol_version: str | None = Field(default=None, alias="protocolVersion")
    capabilities: dict[str, Any] = {}
    client_info: dict[str, Any] | None = Field(default=None, alias="clientInfo")


class McpInitializeResult(BaseModel):
    """Result of an ``initialize`` request."""

    model_config = ConfigDict(populate_by_name=True)

    protocol_version: str = Field(alias="protocolVersion")
    capabilities: dict[str, Any] = Field(
        default_factory=lambda: {"tools": {"listChanged": False}}
    )
    server_info: ServerInfo = Field(alias="serverInfo")
    instructions: str | None = None


class McpToolsListParams(BaseModel):
    """Parameters of a ``tools/list`` request.  Pagination is not supported."""

    cursor: str | None = None


class McpToolsCallParams(BaseModel):
    """Parameters of a ``tools/call`` request."""

    name: StrictStr
    arguments: dict[str, Any] = {}


class McpTextContent(BaseModel):
    """A text content block in a tool result."""

    type: str = "text"
    text: str


class McpToolsCallResult(BaseModel):
    """Result of a ``tools/call`` request."""

    model_config = ConfigDict(populate_by_name=True)

    content: list[McpTextContent]
    structured_content: Any = Field(default=None, alias="structuredContent")
    is_error: bool = Field(default=False, alias="isError")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
