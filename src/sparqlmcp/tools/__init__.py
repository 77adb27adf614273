"""Tool backends and the registry that routes ``tools/call``."""

from sparqlmcp.tools.base import ToolBackend
from sparqlmcp.tools.echo import EchoTool
from sparqlmcp.tools.registry import ToolRegistry, build_registry
from sparqlmcp.tools.sparql import (
    AuthorsByDoiTool,
    SparqlClient,
    SparqlQuerier,
    SparqlQueryTool,
    SparqlResponse,
)

__all__ = [
    "AuthorsByDoiTool",
    "EchoTool",
    "SparqlClient",
    "SparqlQuerier",
    "SparqlQueryTool",
    "SparqlResponse",
    "ToolBackend",
    "ToolRegistry",
    "build_registry",
]
