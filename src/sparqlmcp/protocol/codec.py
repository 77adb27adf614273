"""Message codec — JSON serialization of JSON-RPC envelopes.

Bodies are compact UTF-8 JSON. Forward slashes are never escaped so URLs in
SPARQL queries and endpoint metadata stay readable on the wire. A body holding
unpaired surrogates is sent ASCII-escaped instead, since UTF-8 cannot carry it.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ValidationError

from sparqlmcp.protocol.errors import MessageDecodeError
from sparqlmcp.protocol.models import JsonRpcResponse


def encode(envelope: BaseModel | dict[str, Any]) -> bytes:
    """Serialize an envelope (model or plain dict) to compact JSON bytes."""
    data: Any
    if isinstance(envelope, BaseModel):
        to_wire = getattr(envelope, "to_wire", None)
        data = to_wire() if callable(to_wire) else envelope.model_dump()
    else:
        data = envelope
    text = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError:
        # Lone surrogates decoded from \udXXX escapes have no UTF-8 form.
        return json.dumps(data, separators=(",", ":")).encode("ascii")


def decode(body: bytes) -> Any:
    """Parse a message body into a JSON value.

    Raises :class:`MessageDecodeError` when the body is not valid UTF-8 JSON.
    """
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MessageDecodeError(f"Invalid JSON body: {exc}") from exc


def decode_response(body: bytes) -> JsonRpcResponse:
    """Parse a message body into a :class:`JsonRpcResponse`."""
    data = decode(body)
    try:
        return JsonRpcResponse.model_validate(data)
    except ValidationError as exc:
        raise MessageDecodeError(f"Not a JSON-RPC response: {exc}") from exc
