"""Shared CLI output formatters and logging setup."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from mcpifier.protocols.models import ToolMapping  # noqa: TC001

console = Console()
# stdout carries protocol traffic in stdio mode, so diagnostics go to stderr.
err_console = Console(stderr=True)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def configure_logging(level: str = "INFO") -> None:
    """Route all logging through rich, on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def print_tools_table(tools: Iterable[ToolMapping], *, title: str = "Tools") -> None:
    """Pretty-print tool mappings as a table."""
    table = Table(title=title)
    table.add_column("Name", style="cyan")
    table.add_column("Method")
    table.add_column("Path")
    table.add_column("Description")

    for tool in tools:
        table.add_row(
            tool.name,
            tool.rest.method,
            tool.rest.path,
            _truncate(tool.mcp.description or ""),
        )

    console.print(table)


def print_tools_json(tools: Iterable[ToolMapping]) -> None:
    console.print_json(json.dumps([tool.to_dict() for tool in tools], default=str))


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
