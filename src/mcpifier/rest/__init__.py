"""REST execution engine — tool calls to outbound HTTP requests."""

from mcpifier.rest.executor import RestExecutor, RestResult

__all__ = ["RestExecutor", "RestResult"]
