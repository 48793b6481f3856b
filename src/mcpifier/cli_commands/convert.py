"""``mcpifier convert`` — generate a mappings file from an OpenAPI document."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.markup import escape

from mcpifier.cli_commands._output import (
    LOG_LEVELS,
    configure_logging,
    console,
    err_console,
    print_tools_table,
)


@click.command()
@click.argument("source")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path("mappings.json"),
    show_default=True,
    help="Mappings file to write.",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="INFO",
    show_default=True,
)
@click.option("--quiet", "-q", is_flag=True, help="Do not print the tools table.")
def convert(source: str, output: Path, log_level: str, quiet: bool) -> None:
    """Convert the OpenAPI or Swagger document at SOURCE (file or URL) to tool mappings."""
    from mcpifier.openapi import load_and_convert
    from mcpifier.protocols.errors import ConversionError

    configure_logging(log_level)

    try:
        result = load_and_convert(source, output)
    except ConversionError as exc:
        err_console.print(f"[red]Conversion error:[/red] {escape(str(exc))}")
        sys.exit(1)

    if not quiet and result.tools:
        print_tools_table(result.tools, title=f"Tools from {source}")

    console.print(f"[green]Wrote {len(result.tools)} tool mappings to {output}[/green]")
    if result.base_address:
        console.print(f"  Base address: {result.base_address}")
    else:
        console.print("[yellow]  No base address in document; set rest.baseAddress.[/yellow]")
