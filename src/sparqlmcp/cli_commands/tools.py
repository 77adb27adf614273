"""``sparql-mcp tools`` — inspect and invoke the registered tools locally."""

from __future__ import annotations

import json
from typing import Any

import click

from sparqlmcp.cli_commands._output import console, print_tool_result, print_tools_table

_BOOLEANS = {"true": True, "false": False}


@click.group()
def tools() -> None:
    """Inspect and invoke tools without a client."""


@tools.command("list")
def list_tools() -> None:
    """List the tools this server advertises."""
    from sparqlmcp.config import ServerConfig
    from sparqlmcp.tools.registry import build_registry

    registry = build_registry(ServerConfig.from_env())
    print_tools_table(registry.list_tools())


@tools.command("call")
@click.argument("name")
@click.option(
    "-a",
    "--arg",
    "pairs",
    multiple=True,
    help="Argument as key=value; true/false become booleans.",
)
@click.option("--json", "json_args", default=None, help="All arguments as a JSON object.")
@click.option("--endpoint", default=None, help="SPARQL endpoint URL (overrides SPARQL_ENDPOINT).")
@click.option("--raw", is_flag=True, help="Print the JSON result payload.")
def call(
    name: str,
    pairs: tuple[str, ...],
    json_args: str | None,
    endpoint: str | None,
    raw: bool,
) -> None:
    """Invoke tool NAME once and print its result."""
    from sparqlmcp.config import ServerConfig
    from sparqlmcp.protocol.errors import RpcError
    from sparqlmcp.tools.registry import build_registry

    arguments = _parse_arguments(pairs, json_args)
    registry = build_registry(ServerConfig.from_env(sparql_endpoint=endpoint))
    try:
        result = registry.invoke(name, arguments)
    except RpcError as exc:
        console.print(f"[red]Error {exc.code}:[/red] {exc.message}")
        raise SystemExit(1) from exc

    print_tool_result(result, as_json=raw)


def _parse_arguments(pairs: tuple[str, ...], json_args: str | None) -> dict[str, Any]:
    arguments: dict[str, Any] = {}
    if json_args:
        try:
            loaded = json.loads(json_args)
        except json.JSONDecodeError as exc:
            raise click.BadParameter(str(exc), param_hint="--json") from exc
        if not isinstance(loaded, dict):
            raise click.BadParameter("must be a JSON object", param_hint="--json")
        arguments.update(loaded)

    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {pair!r}", param_hint="--arg")
        arguments[key] = _BOOLEANS.get(value.lower(), value)
    return arguments
