"""``mcpifier tools`` — inspect the configured tool registry."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.markup import escape

from mcpifier.cli_commands._output import (
    console,
    err_console,
    print_tools_json,
    print_tools_table,
)


@click.group()
def tools() -> None:
    """Inspect configured tools."""


@tools.command("list")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Settings file (YAML or JSON).",
)
@click.option(
    "--mappings",
    "-m",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    multiple=True,
    help="Mappings file; repeatable. Defaults to ./mappings.json when present.",
)
@click.option("--json", "as_json", is_flag=True, help="Print the mappings as JSON.")
def list_tools(config: Path | None, mappings: tuple[Path, ...], as_json: bool) -> None:
    """List the tools a server would register, after merging mappings."""
    from mcpifier.config import load_settings
    from mcpifier.protocols.errors import McpifierError
    from mcpifier.protocols.registry import ToolRegistry

    try:
        settings = load_settings(config, mappings or None)
    except McpifierError as exc:
        err_console.print(f"[red]Configuration error:[/red] {escape(str(exc))}")
        sys.exit(1)

    registry = ToolRegistry(settings.tools)
    if not registry:
        console.print("[yellow]No tools configured.[/yellow]")
        return

    if as_json:
        print_tools_json(registry.values())
    else:
        print_tools_table(registry.values())
