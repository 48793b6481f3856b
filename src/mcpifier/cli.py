"""mcpifier CLI entrypoint."""

from __future__ import annotations

import click

from mcpifier import __version__


@click.group()
@click.version_option(version=__version__, prog_name="mcpifier")
def main() -> None:
    """mcpifier — serve a REST API as MCP tools."""


# Register subcommands
from mcpifier.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
