"""JsonRpcDispatcher — routes JSON-RPC requests to the matching RPC handler."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mcpifier.protocols.handlers import (
    DEFAULT_PROTOCOL_VERSION,
    InitializedNotificationHandler,
    InitializeHandler,
    McpMethod,
    PingHandler,
    RpcHandler,
    ToolsCallHandler,
    ToolsListHandler,
)
from mcpifier.protocols.models import JSONRPC_VERSION, JsonRpcRequest, JsonRpcResponse
from mcpifier.utils.telemetry import ATTR_RPC_ERROR_CODE, ATTR_RPC_METHOD, get_tracer

if TYPE_CHECKING:
    from collections.abc import Iterable

    from mcpifier.protocols.models import ServerInfo
    from mcpifier.protocols.registry import ToolRegistry
    from mcpifier.rest.executor import RestExecutor

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


class JsonRpcDispatcher:
    """Maintains a method-to-handler table and dispatches requests.

    The table is keyed by :class:`McpMethod`, so only the fixed set of MCP
    methods can ever resolve.  Handler faults never escape :meth:`dispatch`:
    a :class:`ValueError` becomes ``Invalid params`` and anything else
    ``Internal error``, with the fault message as ``data``.  Notifications
    (requests without an ``id``) always yield the empty response.

    Usage::

        dispatcher = JsonRpcDispatcher.create(registry, executor)
        response = await dispatcher.dispatch(request)
    """

    def __init__(self, handlers: Iterable[RpcHandler]) -> None:
        self._handlers: dict[McpMethod, RpcHandler] = {h.method: h for h in handlers}

    @classmethod
    def create(
        cls,
        registry: ToolRegistry,
        executor: RestExecutor,
        *,
        server_info: ServerInfo | None = None,
        protocol_version: str | None = None,
        instructions: str | None = None,
    ) -> JsonRpcDispatcher:
        """Build a dispatcher wired with every MCP handler."""
        return cls([
            PingHandler(),
            InitializeHandler(
                server_info, protocol_version or DEFAULT_PROTOCOL_VERSION, instructions
            ),
            InitializedNotificationHandler(),
            ToolsListHandler(registry),
            ToolsCallHandler(registry, executor),
        ])

    def resolve(self, method: str) -> RpcHandler | None:
        """Return the handler for *method* (exact, case-sensitive) or ``None``."""
        try:
            return self._handlers.get(McpMethod(method))
        except ValueError:
            return None

    async def dispatch(self, request: JsonRpcRequest) -> JsonRpcResponse:
        """Validate *request*, run its handler, and map faults to JSON-RPC errors."""
        with _tracer.start_as_current_span("mcpifier.rpc.dispatch") as span:
            span.set_attribute(ATTR_RPC_METHOD, request.method)
            response = await self._dispatch(request)
            if response.error is not None:
                span.set_attribute(ATTR_RPC_ERROR_CODE, response.error.code)

        # Notifications are never answered, not even with an error.
        if request.is_notification and not response.is_empty:
            logger.debug("Suppressing response to notification %s", request.method)
            return JsonRpcResponse.empty()
        return response

    async def _dispatch(self, request: JsonRpcRequest) -> JsonRpcResponse:
        if request.jsonrpc != JSONRPC_VERSION:
            logger.warning("Rejecting request with JSON-RPC version %r", request.jsonrpc)
            return JsonRpcResponse.invalid_request(request.id)

        handler = self.resolve(request.method)
        if handler is None:
            logger.warning("Method %s not found", request.method)
            return JsonRpcResponse.method_not_found(request.id, request.method)

        logger.debug("Dispatching %s (id=%r)", request.method, request.id)

        try:
            return await handler.handle(request)
        except ValueError as exc:
            logger.warning("Invalid params for %s: %s", request.method, exc)
            return JsonRpcResponse.invalid_params(request.id, str(exc))
        except Exception as exc:
            logger.exception("Handler for %s failed", request.method)
            return JsonRpcResponse.internal_error(request.id, str(exc))
