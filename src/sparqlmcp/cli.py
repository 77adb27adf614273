"""sparql-mcp CLI entrypoint."""

from __future__ import annotations

import click

from sparqlmcp import __version__


@click.group()
@click.version_option(version=__version__, prog_name="sparql-mcp")
def main() -> None:
    """sparql-mcp — MCP stdio server for SPARQL endpoints."""


# Register subcommands
from sparqlmcp.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
