"""Allow ``python -m sparqlmcp``."""

from sparqlmcp.cli import main

main()
