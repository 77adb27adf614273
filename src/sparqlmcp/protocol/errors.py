"""Shared error types for the protocol layer.

Two families live here. :class:`TransportError` subclasses describe problems
reading a message off the byte stream; the server drops the message and keeps
reading. :class:`RpcError` subclasses carry a JSON-RPC error code and are
reported back to the peer as an ``error`` object.
"""

from __future__ import annotations

from sparqlmcp.protocol.models import JsonRpcError

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
NOT_IMPLEMENTED = -32001


class ProtocolError(Exception):
    """Base error for all protocol-layer failures."""


# ---------------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------------


class TransportError(ProtocolError):
    """Reading or writing a framed message failed."""


class EndOfStream(TransportError):
    """The input stream is exhausted; no further messages will arrive."""

    def __init__(self, detail: str = "end of stream") -> None:
        self.detail = detail
        super().__init__(detail)


class ConnectionError(TransportError):
    """Failed to launch or reach the peer process."""


class FramingError(TransportError):
    """A message could not be extracted from the stream (bad headers, short body)."""


class MessageDecodeError(FramingError):
    """A message body was extracted but is not valid JSON."""


# ---------------------------------------------------------------------------
# JSON-RPC errors reported to the peer
# ---------------------------------------------------------------------------


class RpcError(ProtocolError):
    """An error that is answered with a JSON-RPC ``error`` object."""

    code: int = INTERNAL_ERROR

    def __init__(self, message: str, *, code: int | None = None) -> None:
        if code is not None:
            self.code = code
        self.message = message
        super().__init__(message)

    def to_error(self) -> JsonRpcError:
        return JsonRpcError(code=self.code, message=self.message)


class InvalidRequestError(RpcError):
    """The envelope is not a valid request object."""

    code = INVALID_REQUEST


class MethodNotFoundError(RpcError):
    """No handler is registered for the requested method."""

    code = METHOD_NOT_FOUND

    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"Method not found: {method}")


class ToolNotFoundError(RpcError):
    """Requested tool does not exist in the registry."""

    code = METHOD_NOT_FOUND

    def __init__(self, name: str | None) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name if name is not None else ''}")


class InvalidParamsError(RpcError):
    """Arguments for a method or tool failed validation."""

    code = INVALID_PARAMS


class InternalError(RpcError):
    """A handler failed unexpectedly."""

    code = INTERNAL_ERROR

    def __init__(self, message: str = "Internal error") -> None:
        super().__init__(message)


class NotImplementedFeatureError(RpcError):
    """The method is part of the protocol but this server does not implement it."""

    code = NOT_IMPLEMENTED


# ---------------------------------------------------------------------------
# Client side
# ---------------------------------------------------------------------------


class ToolExecutionError(ProtocolError):
    """A remote call returned an ``error`` object instead of a result."""

    def __init__(self, name: str, code: int, detail: str = "") -> None:
        self.name = name
        self.code = code
        self.detail = detail
        super().__init__(f"Call failed: {name} ({code})" + (f": {detail}" if detail else ""))
