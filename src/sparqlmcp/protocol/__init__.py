"""MCP protocol — framing, JSON-RPC envelopes, dispatch and the server loop."""

from sparqlmcp.protocol.client import MCPClient
from sparqlmcp.protocol.dispatcher import RequestDispatcher
from sparqlmcp.protocol.models import (
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    TextContent,
    ToolCallResult,
    ToolDef,
)
from sparqlmcp.protocol.server import MCPServer
from sparqlmcp.protocol.transport import FramedTransport, FramingMode

__all__ = [
    "FramedTransport",
    "FramingMode",
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "MCPClient",
    "MCPServer",
    "RequestDispatcher",
    "TextContent",
    "ToolCallResult",
    "ToolDef",
]
