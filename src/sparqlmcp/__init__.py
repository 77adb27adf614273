"""sparql-mcp — a stdio Model Context Protocol server for SPARQL endpoints."""

from __future__ import annotations

__version__ = "0.1.0"
