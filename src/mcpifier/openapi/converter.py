"""OpenApiConverter — turns an OpenAPI 3.x or Swagger 2.0 document into tool mappings.

Usage::

    result = OpenApiConverter().convert(load_document("petstore.yaml"))
    for tool in result.tools:
        print(tool.name, tool.rest.method, tool.rest.path)

or, to write a mappings file in one step::

    load_and_convert("https://petstore.example.com/openapi.json", "mappings.json")
"""

from __future__ import annotations

import copy
import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mcpifier.config.models import Mappings, MappingsDocument, MappingsRest
from mcpifier.openapi.dialect import to_json_schema, uses_openapi_dialect
from mcpifier.openapi.loader import load_document
from mcpifier.openapi.naming import generate_tool_name
from mcpifier.openapi.resolver import SchemaResolver
from mcpifier.protocols.errors import ConversionError
from mcpifier.protocols.models import McpToolDefinition, RestConfiguration, ToolMapping

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")
SUCCESS_RESPONSE_CODES = ("200", "201")
REQUEST_BODY_PROPERTY = "requestBody"
JSON_MEDIA_TYPE = "application/json"

# Inline schema keywords of a Swagger 2.0 non-body parameter.
_SWAGGER2_SCHEMA_KEYS = (
    "type",
    "format",
    "items",
    "enum",
    "default",
    "minimum",
    "maximum",
    "exclusiveMinimum",
    "exclusiveMaximum",
    "minLength",
    "maxLength",
    "pattern",
    "minItems",
    "maxItems",
    "uniqueItems",
    "multipleOf",
)
_SERVER_VARIABLE = re.compile(r"\{([^{}]+)\}")


@dataclass
class ConversionResult:
    """The tools generated from one document, plus its base address if declared."""

    tools: list[ToolMapping] = field(default_factory=list)
    base_address: str | None = None

    def to_document(self) -> MappingsDocument:
        rest = MappingsRest(base_address=self.base_address) if self.base_address else None
        return MappingsDocument(mcpifier=Mappings(rest=rest, tools=self.tools))


class OpenApiConverter:
    """Converts every operation of a document into a :class:`ToolMapping`.

    Each operation is converted independently; one that fails is logged and
    skipped.  The input document is never modified.
    """

    def convert(self, document: dict[str, Any]) -> ConversionResult:
        document = copy.deepcopy(document)
        resolver = SchemaResolver(document)
        swagger2 = str(document.get("swagger", "")).startswith("2")
        openapi_dialect = uses_openapi_dialect(document)

        tools: list[ToolMapping] = []
        names: set[str] = set()

        for path, path_item in (document.get("paths") or {}).items():
            path_item = resolver.unwrap(path_item)
            if not isinstance(path_item, dict):
                continue
            shared_parameters = path_item.get("parameters") or []

            for method in HTTP_METHODS:
                operation = path_item.get(method)
                if not isinstance(operation, dict):
                    continue
                try:
                    name = _unique_name(
                        generate_tool_name(
                            path, method, operation.get("operationId"), operation.get("summary")
                        ),
                        names,
                    )
                    tool = self._convert_operation(
                        resolver,
                        path,
                        method,
                        operation,
                        shared_parameters,
                        name,
                        swagger2=swagger2,
                        openapi_dialect=openapi_dialect,
                    )
                except Exception as exc:
                    logger.warning(
                        "Failed to convert operation %s %s: %s", method.upper(), path, exc
                    )
                    continue

                names.add(tool.name)
                tools.append(tool)
                logger.debug("Converted operation %s %s -> %s", method.upper(), path, tool.name)

        logger.debug("Converted %d operations to tools", len(tools))
        return ConversionResult(tools=tools, base_address=_base_address(document, swagger2))

    def _convert_operation(
        self,
        resolver: SchemaResolver,
        path: str,
        method: str,
        operation: dict[str, Any],
        shared_parameters: list[Any],
        name: str,
        *,
        swagger2: bool,
        openapi_dialect: bool,
    ) -> ToolMapping:
        parameters = _merge_parameters(resolver, shared_parameters, operation.get("parameters"))
        body_schema, body_required = self._request_body(resolver, operation, parameters, swagger2)

        properties: dict[str, Any] = {}
        required: list[str] = []

        if body_schema is not None:
            properties[REQUEST_BODY_PROPERTY] = body_schema
            if body_required:
                required.append(REQUEST_BODY_PROPERTY)

        query: list[str] = []
        for parameter in parameters:
            if parameter.get("in") == "body":
                continue
            param_name = parameter["name"]
            if parameter.get("in") == "query":
                query.append(f"{param_name}={{{param_name}}}")

            schema = self._parameter_schema(resolver, parameter, swagger2)
            if schema is None:
                continue
            if parameter.get("description") and isinstance(schema, dict):
                schema["description"] = parameter["description"]
            properties[param_name] = schema
            if parameter.get("required"):
                required.append(param_name)

        input_schema: dict[str, Any] = {"type": "object"}
        if properties:
            input_schema["properties"] = properties
        if required:
            input_schema["required"] = required

        output_schema = self._output_schema(resolver, operation, swagger2)

        if openapi_dialect:
            input_schema = to_json_schema(input_schema)
            output_schema = to_json_schema(output_schema)

        description = (
            operation.get("summary") or operation.get("description") or f"{method.upper()} {path}"
        )

        return ToolMapping(
            mcp=McpToolDefinition(
                name=name,
                description=description,
                input_schema=copy.deepcopy(input_schema),
                output_schema=copy.deepcopy(output_schema),
            ),
            rest=RestConfiguration(
                method=method.upper(),
                path=path,
                query="&".join(query) or None,
                body=f"{{{REQUEST_BODY_PROPERTY}}}" if body_schema is not None else None,
            ),
        )

    def _request_body(
        self,
        resolver: SchemaResolver,
        operation: dict[str, Any],
        parameters: list[dict[str, Any]],
        swagger2: bool,
    ) -> tuple[Any, bool]:
        if swagger2:
            for parameter in parameters:
                if parameter.get("in") == "body":
                    schema = resolver.resolve(parameter.get("schema"))
                    return schema, bool(parameter.get("required"))
            return None, False

        request_body = resolver.unwrap(operation.get("requestBody"))
        if not isinstance(request_body, dict):
            return None, False
        media = _json_media(resolver, request_body.get("content"))
        if media is None:
            return None, False
        return resolver.resolve(media.get("schema")), bool(request_body.get("required"))

    def _parameter_schema(
        self, resolver: SchemaResolver, parameter: dict[str, Any], swagger2: bool
    ) -> Any:
        if "schema" in parameter:
            schema = resolver.resolve(parameter["schema"])
        elif swagger2 and "type" in parameter:
            schema = {key: parameter[key] for key in _SWAGGER2_SCHEMA_KEYS if key in parameter}
            schema = resolver.resolve(schema)
        else:
            media = _json_media(resolver, parameter.get("content"))
            schema = resolver.resolve(media.get("schema")) if media else None

        # Resolved schemas may be shared; the description override must not leak.
        return copy.deepcopy(schema)

    def _output_schema(
        self, resolver: SchemaResolver, operation: dict[str, Any], swagger2: bool
    ) -> Any:
        responses = operation.get("responses") or {}
        for code in SUCCESS_RESPONSE_CODES:
            response = resolver.unwrap(responses.get(code, responses.get(int(code))))
            if not isinstance(response, dict):
                continue
            if swagger2:
                schema = resolver.resolve(response.get("schema"))
            else:
                media = _json_media(resolver, response.get("content"))
                schema = resolver.resolve(media.get("schema")) if media else None
            if isinstance(schema, dict):
                return schema
        return None


def _merge_parameters(
    resolver: SchemaResolver, shared: list[Any], own: list[Any] | None
) -> list[dict[str, Any]]:
    """Path-level parameters overlaid by operation-level ones on ``(name, in)``."""
    merged: dict[tuple[str, str], dict[str, Any]] = {}
    for parameter in [*shared, *(own or [])]:
        parameter = resolver.unwrap(parameter)
        if not isinstance(parameter, dict) or not isinstance(parameter.get("name"), str):
            continue
        merged[(parameter["name"], str(parameter.get("in", "")))] = parameter
    return list(merged.values())


def _json_media(resolver: SchemaResolver, content: Any) -> dict[str, Any] | None:
    if not isinstance(content, dict):
        return None
    media = content.get(JSON_MEDIA_TYPE)
    if media is None:
        media = next(
            (
                value
                for key, value in content.items()
                if key.split(";")[0].strip().lower().endswith("json")
            ),
            None,
        )
    media = resolver.unwrap(media)
    return media if isinstance(media, dict) else None


def _unique_name(name: str, taken: set[str]) -> str:
    if name not in taken:
        return name
    suffix = 2
    while f"{name}_{suffix}" in taken:
        suffix += 1
    unique = f"{name}_{suffix}"
    logger.warning("Duplicate tool name %s renamed to %s", name, unique)
    return unique


def _base_address(document: dict[str, Any], swagger2: bool) -> str | None:
    if swagger2:
        host = document.get("host")
        base_path = document.get("basePath") or ""
        if not host:
            return base_path or None
        schemes = document.get("schemes") or ["https"]
        return f"{schemes[0]}://{host}{base_path}"

    servers = document.get("servers") or []
    if not servers or not isinstance(servers[0], dict) or not servers[0].get("url"):
        return None
    server = servers[0]
    variables = server.get("variables") or {}

    def substitute(match: re.Match[str]) -> str:
        variable = variables.get(match.group(1)) or {}
        return str(variable.get("default", match.group(0)))

    return _SERVER_VARIABLE.sub(substitute, server["url"])


def load_and_convert(source: str, output: str | Path = "mappings.json") -> ConversionResult:
    """Convert the document at *source* and write the mappings file *output*."""
    document = load_document(source)
    result = OpenApiConverter().convert(document)
    logger.info("Created %d tool mappings from '%s'", len(result.tools), source)

    text = json.dumps(result.to_document().to_dict(), indent=2, ensure_ascii=False, default=str)
    try:
        Path(output).write_text(text + "\n", encoding="utf-8")
    except OSError as exc:
        raise ConversionError(source, f"Cannot write {output}: {exc}") from exc

    logger.info("Saved tool mappings to '%s'", output)
    return result
