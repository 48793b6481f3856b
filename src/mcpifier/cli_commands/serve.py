"""``mcpifier serve`` — run the MCP server over stdio or HTTP."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click
from rich.markup import escape

from mcpifier.cli_commands._output import LOG_LEVELS, configure_logging, err_console


@click.command()
@click.option(
    "--mode",
    type=click.Choice(["stdio", "http"]),
    default="stdio",
    show_default=True,
    help="Transport to serve MCP on.",
)
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
@click.option("--host", default="127.0.0.1", show_default=True, help="HTTP bind address.")
@click.option("--port", default=8000, show_default=True, type=int, help="HTTP port.")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="INFO",
    show_default=True,
)
@click.option("--otel", is_flag=True, help="Export trace spans to stderr.")
@click.option(
    "--otlp-endpoint",
    envvar="OTEL_EXPORTER_OTLP_ENDPOINT",
    default=None,
    help="Export trace spans via OTLP/gRPC to this endpoint.",
)
def serve(
    mode: str,
    config: Path | None,
    mappings: tuple[Path, ...],
    host: str,
    port: int,
    log_level: str,
    otel: bool,
    otlp_endpoint: str | None,
) -> None:
    """Serve the configured REST API as MCP tools."""
    from mcpifier.config import load_settings, resolve_base_address, validate_for_startup
    from mcpifier.protocols.errors import McpifierError

    configure_logging(log_level)

    if otel or otlp_endpoint:
        from mcpifier.utils.telemetry import configure_telemetry

        try:
            configure_telemetry(export_to_console=otel, otlp_endpoint=otlp_endpoint)
        except ImportError as exc:
            err_console.print(f"[red]Telemetry error:[/red] {escape(str(exc))}")
            sys.exit(1)

    try:
        settings = load_settings(config, mappings or None)
        validate_for_startup(settings, mode)
        base_address = resolve_base_address(
            settings.rest.base_address, mode=mode, host=host, port=port
        )
    except McpifierError as exc:
        err_console.print(f"[red]Configuration error:[/red] {escape(str(exc))}")
        sys.exit(1)

    if mode == "stdio":
        from mcpifier.server import run_stdio

        try:
            asyncio.run(run_stdio(settings, base_address))
        except KeyboardInterrupt:
            pass
        return

    import uvicorn

    from mcpifier.server import create_http_app

    app = create_http_app(settings, base_address)
    # log_config=None keeps uvicorn's loggers on the rich handler configured above.
    uvicorn.run(app, host=host, port=port, log_level=log_level.lower(), log_config=None)
