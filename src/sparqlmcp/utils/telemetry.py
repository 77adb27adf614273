"""OpenTelemetry tracing for the request loop.

Two spans are emitted: ``mcp.request`` around every dispatched request and
``mcp.tool.call`` around every tool invocation. Both come from the
OpenTelemetry API and are no-ops until :func:`configure_telemetry` installs
an SDK tracer provider (requires ``pip install sparql-mcp[otel]``).

Usage::

    with request_span("tools/call", 7) as span:
        ...
        span.set_attribute(ATTR_ERROR_CODE, -32601)
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager

from opentelemetry import trace

ATTR_METHOD = "mcp.method"
ATTR_REQUEST_ID = "mcp.request.id"
ATTR_TOOL_NAME = "mcp.tool.name"
ATTR_ERROR_CODE = "mcp.error.code"

_INSTRUMENTATION_NAME = "sparqlmcp"
_INSTALL_HINT = "Install it with: pip install sparql-mcp[otel]"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a :class:`~opentelemetry.trace.Tracer` for *name*."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


@contextmanager
def request_span(method: str, request_id: object) -> Iterator[trace.Span]:
    """Open the ``mcp.request`` span for one JSON-RPC request."""
    with get_tracer().start_as_current_span("mcp.request") as span:
        span.set_attribute(ATTR_METHOD, method)
        span.set_attribute(ATTR_REQUEST_ID, str(request_id))
        yield span


@contextmanager
def tool_span(tool_name: str) -> Iterator[trace.Span]:
    """Open the ``mcp.tool.call`` span for one tool invocation."""
    with get_tracer().start_as_current_span("mcp.tool.call") as span:
        span.set_attribute(ATTR_TOOL_NAME, tool_name)
        yield span


def configure_telemetry(
    *,
    service_name: str = "sparql-mcp",
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
) -> None:
    """Install an SDK tracer provider for this process.

    Console spans are written to stderr, since stdout carries protocol
    messages. ``otlp_endpoint`` adds a batched OTLP/gRPC exporter.

    Raises :class:`ImportError` when the ``otel`` extra is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import (
            BatchSpanProcessor,
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )
    except ImportError as exc:
        msg = f"opentelemetry-sdk is required for configure_telemetry(). {_INSTALL_HINT}"
        raise ImportError(msg) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    if export_to_console:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter(out=sys.stderr)))
    if otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
        except ImportError as exc:
            msg = f"opentelemetry-exporter-otlp is required for OTLP export. {_INSTALL_HINT}"
            raise ImportError(msg) from exc
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))

    trace.set_tracer_provider(provider)
