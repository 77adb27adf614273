"""``sparql-mcp serve`` — run the MCP server on stdin/stdout."""

from __future__ import annotations

import logging
import sys

import click

LOG_FORMAT = "[sparql-mcp] %(asctime)s %(levelname)s %(name)s: %(message)s"


@click.command()
@click.option("--endpoint", default=None, help="SPARQL endpoint URL (overrides SPARQL_ENDPOINT).")
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Upstream HTTP timeout in seconds (overrides SPARQL_TIMEOUT).",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    show_default=True,
    help="Verbosity of the stderr log.",
)
@click.option("--otel-console", is_flag=True, help="Export trace spans to stderr.")
@click.option("--otlp-endpoint", default=None, help="Export trace spans via OTLP/gRPC.")
def serve(
    endpoint: str | None,
    timeout: float | None,
    log_level: str,
    otel_console: bool,
    otlp_endpoint: str | None,
) -> None:
    """Serve MCP requests over stdio until the input closes.

    Stdout carries protocol messages only; all logging goes to stderr.
    """
    from sparqlmcp.config import ServerConfig
    from sparqlmcp.protocol.server import MCPServer

    logging.basicConfig(stream=sys.stderr, level=log_level.upper(), format=LOG_FORMAT)
    logger = logging.getLogger("sparqlmcp.serve")

    if otel_console or otlp_endpoint:
        from sparqlmcp.utils.telemetry import configure_telemetry

        try:
            configure_telemetry(export_to_console=otel_console, otlp_endpoint=otlp_endpoint)
        except ImportError as exc:
            raise click.ClickException(str(exc)) from exc

    config = ServerConfig.from_env(sparql_endpoint=endpoint, sparql_timeout=timeout)
    logger.info(
        "Starting %s %s (endpoint %s)",
        config.server_name,
        config.server_version,
        config.sparql_endpoint,
    )
    MCPServer.from_config(config).serve_forever()
