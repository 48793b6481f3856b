"""Shared error types for mcpifier."""

from __future__ import annotations


class McpifierError(Exception):
    """Base error for all mcpifier failures."""


class RpcParamsError(McpifierError, ValueError):
    """A handler received parameters of the wrong shape or format.

    Subclasses :class:`ValueError` so the dispatcher maps it to
    ``Invalid params`` together with pydantic and JSON decoding faults.
    """


class ConversionError(McpifierError):
    """An OpenAPI document could not be loaded or converted."""

    def __init__(self, source: str, detail: str = "") -> None:
        self.source = source
        self.detail = detail
        msg = f"Failed to create tool mappings from '{source}'"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class ConfigurationError(McpifierError):
    """Settings or mappings are unreadable, invalid, or incomplete."""
