"""MCP models — JSON-RPC 2.0 envelopes and tool payloads.

Implements the message format used by the Model Context Protocol for
the lifecycle handshake (``initialize``), tool discovery (``tools/list``)
and execution (``tools/call``).
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr, model_validator

JSONRPC_VERSION = "2.0"

# Booleans are not ids; fractional numbers are echoed unchanged.
RequestId = StrictInt | StrictFloat | StrictStr

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request or notification.

    A message without an ``id`` (or with ``id: null``) is a notification and
    must never be answered.
    """

    jsonrpc: str = JSONRPC_VERSION
    method: str
    id: RequestId | None = None
    params: dict[str, Any] | list[Any] = Field(default_factory=dict)

    @property
    def is_notification(self) -> bool:
        return self.id is None

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-ready dict, omitting ``id`` for notifications."""
        data: dict[str, Any] = {"jsonrpc": self.jsonrpc, "method": self.method}
        if self.id is not None:
            data["id"] = self.id
        data["params"] = self.params
        return data


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response message.

    Carries exactly one of ``result`` or ``error``.
    """

    jsonrpc: str = JSONRPC_VERSION
    id: RequestId | None = None
    result: Any = None
    error: JsonRpcError | None = None

    @model_validator(mode="after")
    def _result_xor_error(self) -> JsonRpcResponse:
        if (self.result is None) == (self.error is None):
            msg = "A response must carry exactly one of 'result' or 'error'"
            raise ValueError(msg)
        return self

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-ready dict with only the populated outcome field."""
        data: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            data["error"] = self.error.model_dump(exclude_none=True)
        else:
            data["result"] = self.result
        return data


# ---------------------------------------------------------------------------
# MCP-specific payloads
# ---------------------------------------------------------------------------


class ToolDef(BaseModel):
    """A tool descriptor as returned by ``tools/list``."""

    model_config = {"populate_by_name": True, "frozen": True}

    name: str
    description: str = ""
    input_schema: dict[str, Any] = Field(default_factory=dict, alias="inputSchema")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class TextContent(BaseModel):
    """Plain text content item of a tool result."""

    type: Literal["text"] = "text"
    text: str


class ToolCallResult(BaseModel):
    """The successful outcome of a ``tools/call``."""

    model_config = {"populate_by_name": True}

    tool_name: str = Field(alias="toolName")
    content: list[TextContent] = []
    meta: dict[str, Any] | None = None

    @classmethod
    def from_text(
        cls, tool_name: str, text: str, meta: dict[str, Any] | None = None
    ) -> ToolCallResult:
        """Create a result with a single text content item."""
        return cls(tool_name=tool_name, content=[TextContent(text=text)], meta=meta)

    @property
    def text(self) -> str:
        """All text content items joined by newlines."""
        return "\n".join(item.text for item in self.content)

    def to_wire(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "toolName": self.tool_name,
            "content": [item.model_dump() for item in self.content],
        }
        if self.meta is not None:
            data["meta"] = dict(self.meta)
        return data
