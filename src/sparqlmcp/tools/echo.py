"""The ``echo`` tool — returns its input, prefixed."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from sparqlmcp.protocol.models import ToolCallResult, ToolDef
from sparqlmcp.tools.base import parse_arguments

ECHO_TOOL = ToolDef(
    name="echo",
    description="Echo back the provided text.",
    input_schema={
        "type": "object",
        "properties": {
            "text": {"type": "string", "description": "Text to echo back"},
        },
        "required": [],
    },
)


class EchoArgs(BaseModel):
    text: str | None = None


class EchoTool:
    """Satisfies :class:`~sparqlmcp.tools.base.ToolBackend`."""

    @property
    def definition(self) -> ToolDef:
        return ECHO_TOOL

    def invoke(self, arguments: dict[str, Any]) -> ToolCallResult:
        args = parse_arguments(EchoArgs, arguments, ECHO_TOOL.name)
        return ToolCallResult.from_text(ECHO_TOOL.name, f"Echo: {args.text or ''}")
