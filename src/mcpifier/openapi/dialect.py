"""Rewriting OpenAPI 3.0 / Swagger 2.0 schemas as JSON Schema 2020-12.

Tool schemas are validated with the 2020-12 dialect, but older documents use
the OpenAPI flavour of JSON Schema: ``nullable``, boolean
``exclusiveMinimum``/``exclusiveMaximum``, Swagger's ``type: file`` and a
few annotation keywords that have no JSON Schema meaning.
"""

from __future__ import annotations

import re
from typing import Any

# OpenAPI-only annotations with no meaning to a JSON Schema validator.
_OPENAPI_ONLY_KEYWORDS = ("nullable", "discriminator", "xml", "externalDocs", "example")

_SINGLE_SCHEMA_KEYWORDS = ("items", "not", "additionalProperties", "contains")
_SCHEMA_LIST_KEYWORDS = ("allOf", "anyOf", "oneOf", "prefixItems")
_SCHEMA_MAP_KEYWORDS = ("properties", "patternProperties")

_JSON_SCHEMA_OPENAPI = re.compile(r"^3\.[1-9]")


def uses_openapi_dialect(document: dict[str, Any]) -> bool:
    """True for Swagger 2.0 and OpenAPI 3.0 documents.

    OpenAPI 3.1 and later already use JSON Schema 2020-12.
    """
    if "swagger" in document:
        return True
    return not _JSON_SCHEMA_OPENAPI.match(str(document.get("openapi", "")))


def to_json_schema(schema: Any) -> Any:
    """Return a 2020-12 copy of an OpenAPI-dialect *schema*.

    *schema* must already be free of references and cycles, as produced by
    :class:`~mcpifier.openapi.resolver.SchemaResolver`.  The input is not
    modified.
    """
    if not isinstance(schema, dict):
        return schema

    result: dict[str, Any] = {}
    for key, value in schema.items():
        if key in _OPENAPI_ONLY_KEYWORDS:
            continue
        if key in _SINGLE_SCHEMA_KEYWORDS and not isinstance(value, list):
            result[key] = to_json_schema(value)
        elif key in _SCHEMA_LIST_KEYWORDS and isinstance(value, list):
            result[key] = [to_json_schema(member) for member in value]
        elif key == "items" and isinstance(value, list):
            # Tuple form of "items" from older drafts.
            result["prefixItems"] = [to_json_schema(member) for member in value]
        elif key in _SCHEMA_MAP_KEYWORDS and isinstance(value, dict):
            result[key] = {name: to_json_schema(member) for name, member in value.items()}
        else:
            result[key] = value

    if "example" in schema and "examples" not in schema:
        result["examples"] = [schema["example"]]

    if result.get("type") == "file":
        result["type"] = "string"
        result.setdefault("format", "binary")

    _exclusive_bound(result, "exclusiveMinimum", "minimum")
    _exclusive_bound(result, "exclusiveMaximum", "maximum")

    if schema.get("nullable") is True:
        return _nullable(result)
    return result


def _exclusive_bound(schema: dict[str, Any], exclusive: str, inclusive: str) -> None:
    """``{minimum: 0, exclusiveMinimum: true}`` becomes ``{exclusiveMinimum: 0}``."""
    flag = schema.get(exclusive)
    if not isinstance(flag, bool):
        return
    del schema[exclusive]
    if flag and inclusive in schema:
        schema[exclusive] = schema.pop(inclusive)


def _nullable(schema: dict[str, Any]) -> dict[str, Any]:
    if "enum" in schema and None not in schema["enum"]:
        schema["enum"] = [*schema["enum"], None]

    kind = schema.get("type")
    if isinstance(kind, str):
        schema["type"] = [kind, "null"]
    elif isinstance(kind, list):
        if "null" not in kind:
            schema["type"] = [*kind, "null"]
    elif "enum" not in schema and any(k in schema for k in _SCHEMA_LIST_KEYWORDS):
        # Composition without a type: null must be allowed alongside it.
        return {"anyOf": [schema, {"type": "null"}]}
    return schema
