"""RestExecutor — turns a tool call into an outbound REST request.

Templates in a :class:`~mcpifier.protocols.models.RestConfiguration` use
``{name}`` placeholders:

* **path** — replaced by the URL-escaped argument, or ``""`` when absent.
* **query** — ``key={name}`` assignments whose argument is absent are
  dropped entirely, the rest are interpolated like the path, and stray
  ``&`` separators are collapsed and trimmed.
* **body** — replaced by the argument's raw JSON text, or ``null``.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx

from mcpifier.utils.telemetry import ATTR_HTTP_METHOD, ATTR_HTTP_STATUS, ATTR_TOOL_NAME, get_tracer

if TYPE_CHECKING:
    from collections.abc import Mapping

    from mcpifier.protocols.models import ToolMapping

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")
_ASSIGNMENT = re.compile(r"([^&?]*?)=\{([^}]+)\}")
_REPEATED_AMPERSANDS = re.compile(r"&+")


@dataclass(frozen=True)
class RestResult:
    """Normalized outcome of a REST call."""

    success: bool
    status_code: int
    body: str


class RestExecutor:
    """Executes tool mappings against a REST API through a shared httpx client.

    The client's ``base_url`` is the configured base address; resolved paths
    are always combined with it as relative references.

    Usage::

        async with RestExecutor.create("https://api.example.com/v1/") as executor:
            result = await executor.execute(tool, {"id": 42}, {"Authorization": "Bearer x"})
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @classmethod
    def create(cls, base_address: str, *, timeout: float = 30.0) -> RestExecutor:
        """Build an executor owning a new client for *base_address*."""
        return cls(httpx.AsyncClient(base_url=base_address, timeout=timeout))

    async def __aenter__(self) -> RestExecutor:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def execute(
        self,
        tool: ToolMapping,
        arguments: Mapping[str, Any],
        forwarded_headers: Mapping[str, str] | None = None,
    ) -> RestResult:
        """Call the REST endpoint behind *tool*.  Never raises for HTTP or network faults."""
        rest = tool.rest
        path = interpolate_path(rest.path, arguments)

        query = interpolate_query(rest.query, arguments) if rest.query else ""
        if query:
            path = f"{path}?{query}"

        # OpenAPI paths start with "/" but must still resolve against the base address.
        path = path.removeprefix("/")

        logger.info("Executing tool %s: %s %s", tool.name, rest.method, path)

        headers: dict[str, str] = {}
        for header_name, header_value in (forwarded_headers or {}).items():
            logger.debug("Forwarding header %s", header_name)
            headers[header_name] = header_value

        content: str | None = None
        if rest.body is not None:
            content = interpolate_body(rest.body, arguments)
            headers.setdefault("Content-Type", "application/json; charset=utf-8")

        with _tracer.start_as_current_span("mcpifier.tool.call") as span:
            span.set_attribute(ATTR_TOOL_NAME, tool.name)
            span.set_attribute(ATTR_HTTP_METHOD, rest.method)
            try:
                response = await self._client.request(
                    rest.method, path, headers=headers, content=content
                )
            except httpx.HTTPError as exc:
                logger.exception("HTTP request failed for tool %s", tool.name)
                return RestResult(False, 500, f"HTTP request failed: {exc}")
            except Exception as exc:
                logger.exception("Unexpected error executing tool %s", tool.name)
                return RestResult(False, 500, f"Unexpected error: {exc}")

            span.set_attribute(ATTR_HTTP_STATUS, response.status_code)

        logger.info("REST API response: %d for tool %s", response.status_code, tool.name)
        return RestResult(response.is_success, response.status_code, response.text)


# ---------------------------------------------------------------------------
# Template interpolation
# ---------------------------------------------------------------------------


def interpolate_path(template: str, arguments: Mapping[str, Any]) -> str:
    """Replace every ``{name}`` with the URL-escaped argument or ``""``."""

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in arguments:
            return ""
        return quote(_as_text(arguments[name]), safe="")

    return _PLACEHOLDER.sub(_replace, template)


def interpolate_query(template: str, arguments: Mapping[str, Any]) -> str:
    """Drop assignments for absent arguments, then interpolate the rest."""
    return interpolate_path(remove_absent_assignments(template, arguments), arguments)


def remove_absent_assignments(query: str, arguments: Mapping[str, Any]) -> str:
    """Remove each ``key={name}`` whose *name* is not in *arguments*.

    ``"from={from}&to={to}"`` with only ``from`` supplied becomes
    ``"from={from}"``.
    """

    def _replace(match: re.Match[str]) -> str:
        return match.group(0) if match.group(2) in arguments else ""

    result = _ASSIGNMENT.sub(_replace, query)
    result = _REPEATED_AMPERSANDS.sub("&", result)
    return result.strip("&")


def interpolate_body(template: str, arguments: Mapping[str, Any]) -> str:
    """Replace every ``{name}`` with the argument's JSON text or ``null``."""

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in arguments:
            return "null"
        return _as_json(arguments[name])

    return _PLACEHOLDER.sub(_replace, template)


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return _as_json(value)


def _as_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
