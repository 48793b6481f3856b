"""Server assembly — wires settings, registry, REST executor and transports."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from mcpifier.protocols.dispatcher import JsonRpcDispatcher
from mcpifier.protocols.registry import ToolRegistry
from mcpifier.rest.executor import RestExecutor
from mcpifier.transport.http import create_app
from mcpifier.transport.stdio import StdioServer, open_stdio
from mcpifier.utils.telemetry import ATTR_TRANSPORT, get_tracer

if TYPE_CHECKING:
    from fastapi import FastAPI

    from mcpifier.config.models import McpifierSettings

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


def create_dispatcher(settings: McpifierSettings, executor: RestExecutor) -> JsonRpcDispatcher:
    """Build the dispatcher serving the tools in *settings*."""
    return JsonRpcDispatcher.create(
        ToolRegistry(settings.tools),
        executor,
        server_info=settings.server_info,
        protocol_version=settings.protocol_version,
        instructions=settings.instructions,
    )


def log_startup_summary(settings: McpifierSettings, mode: str, base_address: str) -> None:
    logger.info("Starting mcpifier on %s transport", mode)
    logger.info("REST base address: %s", base_address)
    logger.info(
        "Registered %d tools: %s",
        len(settings.tools),
        ", ".join(tool.name for tool in settings.tools),
    )


async def run_stdio(settings: McpifierSettings, base_address: str) -> None:
    """Serve MCP on stdin/stdout until input ends."""
    log_startup_summary(settings, "stdio", base_address)
    with _tracer.start_as_current_span("mcpifier.serve") as span:
        span.set_attribute(ATTR_TRANSPORT, "stdio")
        async with RestExecutor.create(base_address, timeout=settings.rest.timeout) as executor:
            reader, writer = await open_stdio()
            await StdioServer(create_dispatcher(settings, executor), reader, writer).serve()


def create_http_app(settings: McpifierSettings, base_address: str) -> FastAPI:
    """Build the FastAPI app; the REST client is closed when the app shuts down."""
    log_startup_summary(settings, "http", base_address)
    executor = RestExecutor.create(base_address, timeout=settings.rest.timeout)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            await executor.close()

    return create_app(
        create_dispatcher(settings, executor),
        route=settings.http.route,
        authorization=settings.authorization,
        forwarded_header_names=settings.rest.forwarded_headers,
        lifespan=lifespan,
    )
