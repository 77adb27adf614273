"""MCPClient — drives an MCP server subprocess over framed stdio.

Used by ``sparql-mcp probe`` and the end-to-end tests to exercise a server
exactly the way a host would: spawn it, handshake, list and call tools.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from typing import Any

from sparqlmcp import __version__
from sparqlmcp.protocol import codec
from sparqlmcp.protocol.errors import ConnectionError, ProtocolError, ToolExecutionError
from sparqlmcp.protocol.models import JsonRpcRequest, JsonRpcResponse, ToolCallResult, ToolDef
from sparqlmcp.protocol.transport import FramedTransport, FramingMode

logger = logging.getLogger(__name__)

CLIENT_PROTOCOL_VERSION = "2024-11-05"


class MCPClient:
    """Context manager that launches and talks to an MCP server process.

    Usage::

        with MCPClient("sparql-mcp serve", framing=FramingMode.LINE_DELIMITED) as client:
            client.initialize()
            tools = client.list_tools()
            result = client.call_tool("echo", {"text": "hi"})
    """

    def __init__(
        self,
        command: str | list[str],
        env: dict[str, str] | None = None,
        *,
        framing: FramingMode = FramingMode.LENGTH_PREFIXED,
        shutdown_timeout: float = 5.0,
    ) -> None:
        self._command = shlex.split(command) if isinstance(command, str) else list(command)
        self._env = env
        self._framing = framing
        self._shutdown_timeout = shutdown_timeout
        self._process: subprocess.Popen[bytes] | None = None
        self._transport: FramedTransport | None = None
        self._next_id = 1

    def __enter__(self) -> MCPClient:
        self.connect()
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    @property
    def transport(self) -> FramedTransport | None:
        return self._transport

    def connect(self) -> None:
        """Launch the server subprocess."""
        try:
            self._process = subprocess.Popen(
                self._command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                env=self._env,
            )
        except OSError as exc:
            raise ConnectionError(str(exc)) from exc
        assert self._process.stdin is not None
        assert self._process.stdout is not None
        self._transport = FramedTransport(
            self._process.stdout, self._process.stdin, mode=self._framing
        )

    def close(self) -> int | None:
        """Close the server's stdin and reap it; returns its exit code."""
        if self._process is None:
            return None
        process, self._process = self._process, None
        self._transport = None
        if process.stdin is not None:
            process.stdin.close()
        try:
            returncode = process.wait(timeout=self._shutdown_timeout)
        except subprocess.TimeoutExpired:
            logger.warning("Server did not exit after stdin closed; terminating")
            process.terminate()
            returncode = process.wait()
        if process.stdout is not None:
            process.stdout.close()
        return returncode

    def initialize(self, protocol_version: str | None = CLIENT_PROTOCOL_VERSION) -> dict[str, Any]:
        """Perform the initialize handshake and acknowledge it."""
        params: dict[str, Any] = {
            "capabilities": {},
            "clientInfo": {"name": "sparql-mcp-probe", "version": __version__},
        }
        if protocol_version is not None:
            params["protocolVersion"] = protocol_version
        result = self._result_of("initialize", self.request("initialize", params))
        self.notify("notifications/initialized")
        return dict(result)

    def list_tools(self) -> list[ToolDef]:
        result = self._result_of("tools/list", self.request("tools/list"))
        return [ToolDef.model_validate(raw) for raw in result.get("tools", [])]

    def call_tool(self, name: str, arguments: dict[str, Any] | None = None) -> ToolCallResult:
        response = self.request("tools/call", {"name": name, "arguments": arguments or {}})
        return ToolCallResult.model_validate(self._result_of(name, response))

    def ping(self) -> bool:
        return bool(self._result_of("ping", self.request("ping")).get("ok"))

    def notify(self, method: str, params: dict[str, Any] | None = None) -> None:
        """Send a notification; no response is expected."""
        self._require_transport().send(JsonRpcRequest(method=method, params=params or {}))

    def request(self, method: str, params: dict[str, Any] | None = None) -> JsonRpcResponse:
        """Send a request and wait for its response."""
        transport = self._require_transport()
        request_id = self._next_id
        self._next_id += 1

        transport.send(JsonRpcRequest(method=method, id=request_id, params=params or {}))
        response = codec.decode_response(transport.read_body())
        if response.id != request_id:
            msg = f"Expected response id {request_id}, got {response.id!r}"
            raise ProtocolError(msg)
        return response

    def _require_transport(self) -> FramedTransport:
        if self._transport is None:
            msg = "Client not connected"
            raise RuntimeError(msg)
        return self._transport

    @staticmethod
    def _result_of(name: str, response: JsonRpcResponse) -> dict[str, Any]:
        if response.error is not None:
            raise ToolExecutionError(name, response.error.code, response.error.message)
        if not isinstance(response.result, dict):
            msg = f"Unexpected result for {name}: {response.result!r}"
            raise ProtocolError(msg)
        return response.result
