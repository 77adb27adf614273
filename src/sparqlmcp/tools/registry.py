"""ToolRegistry — the static catalog of tools and their backends."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sparqlmcp.protocol.errors import ToolNotFoundError
from sparqlmcp.tools.echo import EchoTool
from sparqlmcp.tools.sparql import AuthorsByDoiTool, SparqlClient, SparqlQueryTool
from sparqlmcp.utils.telemetry import tool_span

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from sparqlmcp.config import ServerConfig
    from sparqlmcp.protocol.models import ToolCallResult, ToolDef
    from sparqlmcp.tools.base import ToolBackend
    from sparqlmcp.tools.sparql import SparqlQuerier

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Maintains a name-to-backend map and routes tool invocations.

    Usage::

        registry = ToolRegistry([EchoTool()])
        registry.list_tools()                        # descriptors, in order
        result = registry.invoke("echo", {"text": "hi"})
    """

    def __init__(self, backends: Iterable[ToolBackend] = ()) -> None:
        self._backends: dict[str, ToolBackend] = {}
        for backend in backends:
            self.register(backend)

    def register(self, backend: ToolBackend) -> None:
        """Add *backend*; tool names must be unique."""
        name = backend.definition.name
        if name in self._backends:
            msg = f"Tool already registered: {name}"
            raise ValueError(msg)
        self._backends[name] = backend

    def list_tools(self) -> list[ToolDef]:
        return [backend.definition for backend in self._backends.values()]

    def get(self, name: str | None) -> ToolBackend:
        backend = self._backends.get(name) if name is not None else None
        if backend is None:
            raise ToolNotFoundError(name)
        return backend

    def invoke(self, name: str | None, arguments: dict[str, Any]) -> ToolCallResult:
        """Look up *name* and run it with *arguments*."""
        backend = self.get(name)
        with tool_span(backend.definition.name):
            logger.debug("Invoking tool %s", backend.definition.name)
            return backend.invoke(arguments)

    def __contains__(self, name: object) -> bool:
        return name in self._backends

    def __iter__(self) -> Iterator[ToolDef]:
        return iter(self.list_tools())

    def __len__(self) -> int:
        return len(self._backends)


def build_registry(config: ServerConfig, client: SparqlQuerier | None = None) -> ToolRegistry:
    """Create the registry with the echo and SPARQL tools wired to *config*."""
    sparql = client or SparqlClient(timeout=config.sparql_timeout)
    return ToolRegistry([
        EchoTool(),
        SparqlQueryTool(config.sparql_endpoint, sparql),
        AuthorsByDoiTool(config.sparql_endpoint, sparql),
    ])
