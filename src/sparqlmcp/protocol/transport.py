"""Framed stdio transport — one JSON-RPC message per read or write.

Peers delimit messages in one of two ways on the same byte stream:

* **length-prefixed**: ``Content-Length: N`` header lines, a blank line, then
  exactly ``N`` body bytes (LSP style, used by most test harnesses);
* **line-delimited**: one JSON document per line (used by desktop MCP hosts).

:class:`FramedTransport` detects the convention from the first non-blank line
of each inbound message and answers in whichever mode it last detected.
Stray blank lines between messages are skipped in both modes.
"""

from __future__ import annotations

import logging
import os
import sys
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

from sparqlmcp.protocol import codec
from sparqlmcp.protocol.errors import EndOfStream, FramingError

if TYPE_CHECKING:
    from pydantic import BaseModel

logger = logging.getLogger(__name__)

_JSON_OPENERS = (b"{", b"[")
_CONTENT_LENGTH = "content-length"

# Larger Content-Length declarations are rejected as framing errors.
MAX_BODY_BYTES = 16 * 1024 * 1024
_READ_CHUNK = 65536


class FramingMode(str, Enum):
    """How message boundaries are marked on the stream."""

    LENGTH_PREFIXED = "length"
    LINE_DELIMITED = "line"


DEFAULT_MODE = FramingMode.LENGTH_PREFIXED


class ByteReader(Protocol):
    def readline(self) -> bytes: ...
    def read(self, size: int, /) -> bytes: ...


class ByteWriter(Protocol):
    def write(self, data: bytes, /) -> Any: ...
    def flush(self) -> None: ...


class FramedTransport:
    """Reads and writes discrete messages over a pair of binary streams.

    The framing mode is per-instance state: it starts unset (writes then use
    :data:`DEFAULT_MODE`), is updated only by the read path, and is consulted
    by every write. Pass ``mode`` to pin the initial write framing, as a
    client does before it has received anything.
    """

    def __init__(
        self,
        reader: ByteReader,
        writer: ByteWriter,
        *,
        mode: FramingMode | None = None,
    ) -> None:
        self._reader = reader
        self._writer = writer
        self._mode = mode

    @classmethod
    def stdio(cls) -> FramedTransport:
        """Build a transport over the process's binary stdin/stdout."""
        if sys.platform == "win32":
            import msvcrt

            msvcrt.setmode(sys.stdin.fileno(), os.O_BINARY)
            msvcrt.setmode(sys.stdout.fileno(), os.O_BINARY)
        return cls(sys.stdin.buffer, sys.stdout.buffer)

    @property
    def mode(self) -> FramingMode | None:
        """The framing last detected on input, or ``None`` before any read."""
        return self._mode

    @property
    def write_mode(self) -> FramingMode:
        """The framing the next write will use."""
        return self._mode or DEFAULT_MODE

    # -- read path ----------------------------------------------------------

    def receive(self) -> Any:
        """Read one message and decode its JSON body."""
        return codec.decode(self.read_body())

    def read_body(self) -> bytes:
        """Read one raw message body.

        Raises :class:`EndOfStream` when the input is exhausted and
        :class:`FramingError` when a message is malformed. After a
        ``FramingError`` the caller may keep reading.
        """
        while True:
            line = self._readline()
            stripped = line.lstrip()
            if not stripped:
                continue
            if stripped[:1] in _JSON_OPENERS:
                self._detect(FramingMode.LINE_DELIMITED)
                return stripped
            self._detect(FramingMode.LENGTH_PREFIXED)
            return self._read_length_prefixed(line)

    def _read_length_prefixed(self, first_header: bytes) -> bytes:
        headers: dict[str, str] = {}
        line = first_header
        while line.strip():
            key, sep, value = line.partition(b":")
            if sep:
                headers[key.strip().decode("latin-1").lower()] = value.strip().decode("latin-1")
            else:
                logger.debug("Ignoring malformed header line: %r", line)
            line = self._readline()

        raw_length = headers.get(_CONTENT_LENGTH)
        if raw_length is None:
            msg = "Missing Content-Length header"
            raise FramingError(msg)
        try:
            length = int(raw_length)
        except ValueError as exc:
            msg = f"Invalid Content-Length: {raw_length!r}"
            raise FramingError(msg) from exc
        if length <= 0:
            msg = f"Invalid Content-Length: {length}"
            raise FramingError(msg)
        if length > MAX_BODY_BYTES:
            msg = f"Content-Length {length} exceeds the {MAX_BODY_BYTES} byte limit"
            raise FramingError(msg)
        return self._read_exact(length)

    def _read_exact(self, length: int) -> bytes:
        chunks: list[bytes] = []
        remaining = length
        while remaining > 0:
            chunk = self._reader.read(min(remaining, _READ_CHUNK))
            if not chunk:
                msg = f"Stream ended after {length - remaining} of {length} body bytes"
                raise FramingError(msg)
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)

    def _readline(self) -> bytes:
        raw = self._reader.readline()
        if not raw:
            raise EndOfStream
        return raw.rstrip(b"\r\n")

    def _detect(self, mode: FramingMode) -> None:
        if mode is not self._mode:
            logger.info("Framing mode detected: %s", mode.value)
            self._mode = mode

    # -- write path ---------------------------------------------------------

    def send(self, envelope: BaseModel | dict[str, Any]) -> None:
        """Encode an envelope and write it as one framed message."""
        self.write_body(codec.encode(envelope))

    def write_body(self, body: bytes) -> None:
        """Write one message body using :attr:`write_mode`, then flush."""
        if self.write_mode is FramingMode.LINE_DELIMITED:
            payload = body + b"\n"
        else:
            payload = b"Content-Length: %d\r\n\r\n" % len(body) + body
        self._writer.write(payload)
        self._writer.flush()
