"""Tests for the dual-mode framed transport."""

import io
import json

import pytest

from sparqlmcp.protocol.errors import EndOfStream, FramingError, MessageDecodeError
from sparqlmcp.protocol.models import JsonRpcResponse
from sparqlmcp.protocol.transport import DEFAULT_MODE, MAX_BODY_BYTES, FramedTransport, FramingMode


def _framed(payload: dict | str) -> bytes:
    body = payload if isinstance(payload, str) else json.dumps(payload)
    raw = body.encode()
    return b"Content-Length: %d\r\n\r\n" % len(raw) + raw


def _transport(data: bytes, **kwargs) -> tuple[FramedTransport, io.BytesIO]:
    out = io.BytesIO()
    return FramedTransport(io.BytesIO(data), out, **kwargs), out


class TestReadLengthPrefixed:
    def test_reads_single_message(self) -> None:
        transport, _ = _transport(_framed({"jsonrpc": "2.0", "id": 1, "method": "ping"}))
        assert transport.receive() == {"jsonrpc": "2.0", "id": 1, "method": "ping"}
        assert transport.mode is FramingMode.LENGTH_PREFIXED

    def test_reads_back_to_back_messages(self) -> None:
        data = _framed({"id": 1, "method": "a"}) + _framed({"id": 2, "method": "b"})
        transport, _ = _transport(data)
        assert transport.receive()["method"] == "a"
        assert transport.receive()["method"] == "b"
        with pytest.raises(EndOfStream):
            transport.receive()

    def test_header_name_is_case_insensitive(self) -> None:
        body = b'{"id":1,"method":"ping"}'
        data = b"content-LENGTH: %d\r\n\r\n" % len(body) + body
        transport, _ = _transport(data)
        assert transport.receive()["method"] == "ping"

    def test_extra_headers_are_ignored(self) -> None:
        body = b'{"id":1,"method":"ping"}'
        data = (
            b"Content-Type: application/vscode-jsonrpc; charset=utf-8\r\n"
            b"Content-Length: %d\r\n\r\n" % len(body)
        ) + body
        transport, _ = _transport(data)
        assert transport.receive()["id"] == 1

    def test_bare_newline_header_terminators(self) -> None:
        body = b'{"id":7,"method":"ping"}'
        data = b"Content-Length: %d\n\n" % len(body) + body
        transport, _ = _transport(data)
        assert transport.receive()["id"] == 7

    def test_body_length_counts_bytes_not_characters(self) -> None:
        body = json.dumps({"id": 1, "method": "echo", "params": {"text": "héllo"}}, ensure_ascii=False)
        raw = body.encode()
        transport, _ = _transport(b"Content-Length: %d\r\n\r\n" % len(raw) + raw)
        assert transport.receive()["params"]["text"] == "héllo"

    def test_partial_reads_are_retried(self) -> None:
        class Trickle(io.BytesIO):
            def read(self, size: int = -1) -> bytes:
                return super().read(min(size, 3))

        data = _framed({"id": 1, "method": "ping"})
        transport = FramedTransport(Trickle(data), io.BytesIO())
        assert transport.receive()["method"] == "ping"

    def test_missing_content_length_is_framing_error(self) -> None:
        transport, _ = _transport(b"X-Other: 1\r\n\r\n{}")
        with pytest.raises(FramingError, match="Missing Content-Length"):
            transport.read_body()

    @pytest.mark.parametrize("value", [b"0", b"-5", b"abc"])
    def test_invalid_content_length_is_framing_error(self, value: bytes) -> None:
        transport, _ = _transport(b"Content-Length: " + value + b"\r\n\r\n")
        with pytest.raises(FramingError, match="Invalid Content-Length"):
            transport.read_body()

    @pytest.mark.parametrize("value", [b"99999999999999999999999", b"1000000000000000"])
    def test_oversized_content_length_is_framing_error(self, value: bytes) -> None:
        transport, _ = _transport(b"Content-Length: " + value + b"\r\n\r\n{}")
        with pytest.raises(FramingError, match="exceeds"):
            transport.read_body()

    def test_body_at_size_limit_is_accepted(self) -> None:
        body = b"x" * MAX_BODY_BYTES
        transport, _ = _transport(b"Content-Length: %d\r\n\r\n" % MAX_BODY_BYTES + body)
        assert transport.read_body() == body

    def test_body_is_read_in_bounded_chunks(self) -> None:
        requested: list[int] = []

        class Recording(io.BytesIO):
            def read(self, size: int = -1) -> bytes:
                requested.append(size)
                return super().read(size)

        body = b"y" * 200_000
        transport = FramedTransport(Recording(b"Content-Length: 200000\r\n\r\n" + body), io.BytesIO())
        assert transport.read_body() == body
        assert max(requested) <= 65536

    def test_truncated_body_is_error_not_partial_parse(self) -> None:
        transport, _ = _transport(b'Content-Length: 100\r\n\r\n{"id":1}')
        with pytest.raises(FramingError, match="Stream ended"):
            transport.read_body()
        with pytest.raises(EndOfStream):
            transport.read_body()

    def test_eof_inside_headers_is_end_of_stream(self) -> None:
        transport, _ = _transport(b"Content-Length: 10\r\n")
        with pytest.raises(EndOfStream):
            transport.read_body()

    def test_invalid_json_body_is_decode_error(self) -> None:
        transport, _ = _transport(_framed("{not json"))
        with pytest.raises(MessageDecodeError):
            transport.receive()

    def test_reading_continues_after_bad_message(self) -> None:
        data = b"Content-Length: 0\r\n\r\n" + _framed({"id": 2, "method": "ping"})
        transport, _ = _transport(data)
        with pytest.raises(FramingError):
            transport.receive()
        assert transport.receive()["id"] == 2


class TestReadLineDelimited:
    def test_reads_json_line(self) -> None:
        transport, _ = _transport(b'{"jsonrpc":"2.0","id":1,"method":"ping"}\n')
        assert transport.receive()["method"] == "ping"
        assert transport.mode is FramingMode.LINE_DELIMITED

    def test_tolerates_crlf_and_leading_whitespace(self) -> None:
        transport, _ = _transport(b'   {"id":1,"method":"ping"}\r\n')
        assert transport.receive()["id"] == 1

    def test_array_line_is_line_delimited(self) -> None:
        transport, _ = _transport(b'[{"id":1,"method":"ping"}]\n')
        assert transport.receive() == [{"id": 1, "method": "ping"}]
        assert transport.mode is FramingMode.LINE_DELIMITED

    def test_last_line_without_newline(self) -> None:
        transport, _ = _transport(b'{"id":3,"method":"ping"}')
        assert transport.receive()["id"] == 3

    def test_invalid_json_line_is_decode_error_and_session_continues(self) -> None:
        transport, _ = _transport(b'{"id": oops}\n{"id":2,"method":"ping"}\n')
        with pytest.raises(MessageDecodeError):
            transport.receive()
        assert transport.receive()["id"] == 2

    def test_stray_blank_lines_are_skipped(self) -> None:
        transport, _ = _transport(b'\n\r\n   \n{"id":1,"method":"ping"}\n')
        assert transport.receive()["id"] == 1

    def test_only_blank_lines_is_end_of_stream(self) -> None:
        transport, _ = _transport(b"\n\n\r\n")
        with pytest.raises(EndOfStream):
            transport.receive()

    def test_empty_stream_is_end_of_stream(self) -> None:
        transport, _ = _transport(b"")
        with pytest.raises(EndOfStream):
            transport.read_body()


class TestModeDetection:
    def test_mode_unset_before_read(self) -> None:
        transport, _ = _transport(b"")
        assert transport.mode is None
        assert transport.write_mode is DEFAULT_MODE is FramingMode.LENGTH_PREFIXED

    def test_mode_follows_most_recent_message(self) -> None:
        data = b'{"id":1,"method":"ping"}\n' + _framed({"id": 2, "method": "ping"})
        transport, _ = _transport(data)
        transport.receive()
        assert transport.write_mode is FramingMode.LINE_DELIMITED
        transport.receive()
        assert transport.write_mode is FramingMode.LENGTH_PREFIXED

    def test_pinned_mode_is_used_until_first_read(self) -> None:
        transport, out = _transport(b"", mode=FramingMode.LINE_DELIMITED)
        transport.write_body(b"{}")
        assert out.getvalue() == b"{}\n"

    def test_mode_is_per_instance(self) -> None:
        line, _ = _transport(b'{"id":1,"method":"ping"}\n')
        framed, _ = _transport(_framed({"id": 1, "method": "ping"}))
        line.receive()
        framed.receive()
        assert line.mode is FramingMode.LINE_DELIMITED
        assert framed.mode is FramingMode.LENGTH_PREFIXED


class TestWrite:
    def test_default_write_is_length_prefixed(self) -> None:
        transport, out = _transport(b"")
        transport.send({"jsonrpc": "2.0", "id": 1, "result": {"ok": True}})
        body = b'{"jsonrpc":"2.0","id":1,"result":{"ok":true}}'
        assert out.getvalue() == b"Content-Length: %d\r\n\r\n" % len(body) + body

    def test_reply_after_length_prefixed_read_is_length_prefixed(self) -> None:
        transport, out = _transport(_framed({"id": 1, "method": "ping"}))
        transport.receive()
        transport.send(JsonRpcResponse(id=1, result={"ok": True}))
        assert out.getvalue().startswith(b"Content-Length: ")
        header, _, body = out.getvalue().partition(b"\r\n\r\n")
        assert int(header.split(b":")[1]) == len(body)
        assert json.loads(body) == {"jsonrpc": "2.0", "id": 1, "result": {"ok": True}}

    def test_reply_after_line_read_is_line_delimited(self) -> None:
        transport, out = _transport(b'{"id":1,"method":"ping"}\n')
        transport.receive()
        transport.send(JsonRpcResponse(id=1, result={"ok": True}))
        written = out.getvalue()
        assert written.endswith(b"\n")
        assert written.count(b"\n") == 1
        assert json.loads(written) == {"jsonrpc": "2.0", "id": 1, "result": {"ok": True}}

    def test_slashes_are_not_escaped(self) -> None:
        transport, out = _transport(b"", mode=FramingMode.LINE_DELIMITED)
        transport.send({"url": "https://example.org/sparql"})
        assert b"https://example.org/sparql" in out.getvalue()

    def test_content_length_uses_utf8_byte_length(self) -> None:
        transport, out = _transport(b"")
        transport.send({"text": "é"})
        header, _, body = out.getvalue().partition(b"\r\n\r\n")
        assert int(header.split(b":")[1]) == len(body) == len('{"text":"é"}'.encode())

    def test_flushes_after_every_write(self) -> None:
        class Recorder(io.BytesIO):
            flushes = 0

            def flush(self) -> None:
                Recorder.flushes += 1

        out = Recorder()
        transport = FramedTransport(io.BytesIO(), out)
        transport.send({"a": 1})
        transport.send({"b": 2})
        assert Recorder.flushes == 2
