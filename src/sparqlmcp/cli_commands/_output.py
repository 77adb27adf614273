"""Shared CLI output formatters."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from sparqlmcp.protocol.models import ToolCallResult, ToolDef

console = Console()


def print_tools_table(tools: list[ToolDef], *, title: str = "Registered Tools") -> None:
    """Pretty-print tool descriptors as a table."""
    table = Table(title=title)
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Required")

    for tool in tools:
        required = tool.input_schema.get("required", [])
        table.add_row(
            tool.name,
            _truncate(tool.description),
            ", ".join(required) or "-",
        )

    console.print(table)


def print_tool_result(result: ToolCallResult, *, as_json: bool = False) -> None:
    """Print a tool result as its text content, or as the raw JSON payload."""
    if as_json:
        print_json(result.to_wire())
        return
    console.print(f"[bold]{result.tool_name}[/bold]")
    if result.meta:
        for key, val in result.meta.items():
            console.print(f"  {key}: {val}")
    console.print(result.text, markup=False, highlight=False)


def print_json(data: Any) -> None:
    console.print_json(json.dumps(data, default=str))


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
