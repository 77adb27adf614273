"""``sparql-mcp probe`` — smoke-test an MCP stdio server process."""

from __future__ import annotations

import click

from sparqlmcp.cli_commands._output import console, print_json, print_tool_result, print_tools_table


@click.command()
@click.argument("command")
@click.option(
    "--framing",
    type=click.Choice(["length", "line"]),
    default="length",
    show_default=True,
    help="Message framing to speak to the server.",
)
@click.option("--query", default=None, help="Also run this query through sparqlQuery.")
@click.option("--doi", default=None, help="Also look up this DOI through authorsByDoi.")
@click.option("--echo", "echo_text", default=None, help="Also call the echo tool with this text.")
def probe(
    command: str,
    framing: str,
    query: str | None,
    doi: str | None,
    echo_text: str | None,
) -> None:
    """Launch COMMAND as an MCP server and exercise it.

    Performs ``initialize``, the ``notifications/initialized`` acknowledgement
    and ``tools/list``, then any tool calls requested by the options.
    """
    from sparqlmcp.protocol.client import MCPClient
    from sparqlmcp.protocol.errors import ProtocolError
    from sparqlmcp.protocol.transport import FramingMode

    calls: list[tuple[str, dict[str, str]]] = []
    if echo_text is not None:
        calls.append(("echo", {"text": echo_text}))
    if query is not None:
        calls.append(("sparqlQuery", {"query": query}))
    if doi is not None:
        calls.append(("authorsByDoi", {"doi": doi}))

    try:
        with MCPClient(command, framing=FramingMode(framing)) as client:
            console.print("[bold]initialize[/bold]")
            print_json(client.initialize())

            tool_defs = client.list_tools()
            if tool_defs:
                print_tools_table(tool_defs, title="Advertised Tools")
            else:
                console.print("[yellow]No tools advertised.[/yellow]")

            for name, arguments in calls:
                print_tool_result(client.call_tool(name, arguments))
    except (ProtocolError, RuntimeError) as exc:
        console.print(f"[red]Probe error:[/red] {exc}")
        raise SystemExit(1) from exc
