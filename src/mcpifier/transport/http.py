"""HTTP transport — MCP over single-request JSON POST, served with FastAPI.

Each POST carries one JSON-RPC message and receives its response as the
body (``200``), or ``204`` when there is nothing to say.  An optional
bearer challenge points unauthenticated clients at the protected resource
metadata document served under ``/.well-known/oauth-protected-resource``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mcpifier import __version__
from mcpifier.protocols.context import forwarded_headers
from mcpifier.transport.framing import decode_request
from mcpifier.utils.telemetry import ATTR_HTTP_METHOD, ATTR_HTTP_STATUS, get_tracer

if TYPE_CHECKING:
    from mcpifier.config.models import AuthorizationSettings
    from mcpifier.protocols.dispatcher import JsonRpcDispatcher
    from mcpifier.protocols.models import JsonRpcResponse

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

WELL_KNOWN_RESOURCE_PATH = "/.well-known/oauth-protected-resource"


def create_app(
    dispatcher: JsonRpcDispatcher,
    *,
    route: str = "/",
    authorization: AuthorizationSettings | None = None,
    forwarded_header_names: Sequence[str] = ("Authorization",),
    lifespan: Any = None,
) -> FastAPI:
    """Build the FastAPI application serving *dispatcher* at *route*.

    Args:
        dispatcher: Handles every decoded request.
        route: Path of the MCP endpoint.
        authorization: Bearer challenge and resource metadata settings.
        forwarded_header_names: Inbound headers (case-insensitive) passed
            through to the REST API on ``tools/call``.
        lifespan: Optional lifespan context, e.g. to close the REST client.
    """
    route = "/" + route.strip("/") if route.strip("/") else "/"
    require_authorization = bool(authorization and authorization.require_authorization)
    metadata = authorization.resource_metadata if authorization else None
    metadata_path = WELL_KNOWN_RESOURCE_PATH + route

    app = FastAPI(title="mcpifier", version=__version__, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["WWW-Authenticate"],
    )

    @app.middleware("http")
    async def access_log(request: Request, call_next: Any) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s -> %d (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    @app.post(route)
    async def handle_mcp(request: Request) -> Response:
        with _tracer.start_as_current_span("mcpifier.http.request") as span:
            span.set_attribute(ATTR_HTTP_METHOD, request.method)
            response = await _handle(request)
            span.set_attribute(ATTR_HTTP_STATUS, response.status_code)
            return response

    async def _handle(request: Request) -> Response:
        if require_authorization and "authorization" not in request.headers:
            logger.info("Rejecting unauthenticated request to %s", request.url.path)
            return Response(
                status_code=401,
                headers={"WWW-Authenticate": _bearer_challenge(request)},
            )

        rpc_request, error = decode_request(await request.body())
        if error is not None:
            return _json(error)

        assert rpc_request is not None
        headers = {
            name: request.headers[name]
            for name in forwarded_header_names
            if name in request.headers
        }
        with forwarded_headers(headers):
            response = await dispatcher.dispatch(rpc_request)

        if response.is_empty:
            return Response(status_code=204)
        return _json(response)

    @app.get(metadata_path)
    async def protected_resource_metadata() -> Response:
        try:
            content = (
                metadata.model_dump(exclude_none=True) if metadata is not None else None
            )
            return JSONResponse(content=content)
        except Exception:
            logger.exception("Failed to serve protected resource metadata")
            return Response(status_code=500)

    return app


def _bearer_challenge(request: Request) -> str:
    url = request.url
    resource = f"{url.scheme}://{url.netloc}{WELL_KNOWN_RESOURCE_PATH}{url.path}"
    return f'Bearer resource_metadata="{resource}"'


def _json(response: JsonRpcResponse) -> JSONResponse:
    # JSON-RPC errors still travel with HTTP 200.
    return JSONResponse(content=response.to_dict())
