"""OpenAPI conversion — documents in, tool mappings out."""

from mcpifier.openapi.converter import ConversionResult, OpenApiConverter, load_and_convert
from mcpifier.openapi.dialect import to_json_schema, uses_openapi_dialect
from mcpifier.openapi.loader import load_document, parse_document
from mcpifier.openapi.naming import generate_tool_name, singularize, to_snake_case
from mcpifier.openapi.resolver import SchemaResolver

__all__ = [
    "ConversionResult",
    "OpenApiConverter",
    "SchemaResolver",
    "generate_tool_name",
    "load_and_convert",
    "load_document",
    "parse_document",
    "singularize",
    "to_json_schema",
    "to_snake_case",
    "uses_openapi_dialect",
]
