"""SPARQL tools — ``sparqlQuery`` and ``authorsByDoi``.

Both backends delegate the HTTP round trip to a :class:`SparqlQuerier`
(by default :class:`SparqlClient`, built on ``httpx``) and always succeed at
the protocol level: upstream failures are rendered into the result text, with
the HTTP status (or ``None``) in ``meta.status``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import httpx
from pydantic import BaseModel, Field

from sparqlmcp.protocol.errors import InvalidParamsError
from sparqlmcp.protocol.models import ToolCallResult, ToolDef
from sparqlmcp.tools.base import parse_arguments

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 20.0

ACCEPT_JSON = "application/sparql-results+json, application/json;q=0.9, */*;q=0.1"
ACCEPT_RDF = "text/turtle, application/n-triples;q=0.9, application/rdf+xml;q=0.8, */*;q=0.1"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=UTF-8"

NO_AUTHORS_TEXT = "No authors found for that DOI."

# ---------------------------------------------------------------------------
# HTTP collaborator
# ---------------------------------------------------------------------------


class SparqlResponse(BaseModel):
    """Outcome of one SPARQL HTTP request."""

    ok: bool
    status: int | None = None
    body: str = ""
    error: str | None = None


class SparqlQuerier(Protocol):
    def query(self, endpoint: str, query: str, accept_json: bool = True) -> SparqlResponse: ...


class SparqlClient:
    """POSTs form-encoded queries to a SPARQL endpoint.

    Every request is bounded by ``timeout`` seconds. Transport failures and
    non-2xx answers come back as ``ok=False`` responses, never as exceptions.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    @property
    def timeout(self) -> float:
        return self._timeout

    def query(self, endpoint: str, query: str, accept_json: bool = True) -> SparqlResponse:
        headers = {
            "Accept": ACCEPT_JSON if accept_json else ACCEPT_RDF,
            "Content-Type": FORM_CONTENT_TYPE,
        }
        logger.info("Running SPARQL query against %s", endpoint)
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(endpoint, data={"query": query}, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("SPARQL request to %s failed: %s", endpoint, exc)
            return SparqlResponse(ok=False, error=f"{type(exc).__name__}: {exc}")

        if not response.is_success:
            logger.warning("SPARQL endpoint %s answered HTTP %d", endpoint, response.status_code)
            return SparqlResponse(
                ok=False,
                status=response.status_code,
                body=response.text,
                error=response.reason_phrase or "request failed",
            )
        return SparqlResponse(ok=True, status=response.status_code, body=response.text)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def pretty_json(data: Any) -> str:
    return json.dumps(data, indent=4, ensure_ascii=False)


def format_error(response: SparqlResponse) -> str:
    status = response.status if response.status is not None else "n/a"
    text = f"SPARQL error (HTTP {status}): {response.error or 'unknown error'}"
    if response.body:
        text += "\n\n" + response.body
    return text


def format_sparql_result(response: SparqlResponse) -> str:
    """Pretty-print a JSON body, pass anything else (Turtle, XML) through."""
    if not response.ok:
        return format_error(response)
    try:
        data = json.loads(response.body)
    except json.JSONDecodeError:
        return response.body
    if data is None:
        return response.body
    return pretty_json(data)


def extract_author_names(bindings: list[Any]) -> list[str]:
    """Collect ``authorName`` values from SPARQL JSON ``results.bindings`` rows."""
    names: list[str] = []
    for row in bindings:
        if not isinstance(row, dict):
            continue
        binding = row.get("authorName")
        if isinstance(binding, dict) and "value" in binding:
            names.append(str(binding["value"]))
    return names


def format_authors_result(response: SparqlResponse) -> str:
    if not response.ok:
        return format_error(response)
    try:
        data = json.loads(response.body)
    except json.JSONDecodeError:
        return response.body
    if not isinstance(data, dict):
        return response.body
    results = data.get("results")
    if not isinstance(results, dict) or not isinstance(results.get("bindings"), list):
        return pretty_json(data)

    names = extract_author_names(results["bindings"])
    if not names:
        return NO_AUTHORS_TEXT
    return "Authors:\n" + "".join(f"- {name}\n" for name in names)


def build_authors_by_doi_query(doi: str) -> str:
    """Build the SELECT query listing the authors of the article with *doi*."""
    literal = doi.replace("\\", "\\\\").replace('"', '\\"')
    return f"""PREFIX schema: <https://schema.org/>

SELECT DISTINCT ?authorName WHERE {{
  ?article a schema:ScholarlyArticle ;
           schema:identifier ?doi ;
           schema:author ?author .

  ?author a schema:Person ;
          schema:name ?authorName .

  FILTER( LCASE(STR(?doi)) = LCASE("{literal}") )
}}
ORDER BY ?authorName"""


# ---------------------------------------------------------------------------
# Tool backends
# ---------------------------------------------------------------------------

SPARQL_QUERY_TOOL = ToolDef(
    name="sparqlQuery",
    description="Run an arbitrary SPARQL query against the configured endpoint.",
    input_schema={
        "type": "object",
        "properties": {
            "query": {"type": "string", "description": "SPARQL query string."},
            "jsonPreferred": {
                "type": "boolean",
                "description": "If true, request SPARQL JSON results (default true).",
            },
        },
        "required": ["query"],
    },
)

AUTHORS_BY_DOI_TOOL = ToolDef(
    name="authorsByDoi",
    description=(
        "Given a DOI, find all authors of the corresponding schema.org ScholarlyArticle."
    ),
    input_schema={
        "type": "object",
        "properties": {
            "doi": {
                "type": "string",
                "description": 'DOI of the paper, e.g. "10.1234/foo.bar".',
            },
        },
        "required": ["doi"],
    },
)


class SparqlQueryArgs(BaseModel):
    model_config = {"populate_by_name": True}

    query: str | None = None
    json_preferred: bool | None = Field(default=None, alias="jsonPreferred")


class AuthorsByDoiArgs(BaseModel):
    doi: str | None = None


class SparqlQueryTool:
    """Runs a caller-supplied query. Satisfies ``ToolBackend``."""

    def __init__(self, endpoint: str, client: SparqlQuerier) -> None:
        self._endpoint = endpoint
        self._client = client

    @property
    def definition(self) -> ToolDef:
        return SPARQL_QUERY_TOOL

    def invoke(self, arguments: dict[str, Any]) -> ToolCallResult:
        args = parse_arguments(SparqlQueryArgs, arguments, SPARQL_QUERY_TOOL.name)
        query = (args.query or "").strip()
        if not query:
            msg = 'Missing or empty "query" argument for sparqlQuery.'
            raise InvalidParamsError(msg)
        accept_json = True if args.json_preferred is None else args.json_preferred

        response = self._client.query(self._endpoint, query, accept_json)
        return ToolCallResult.from_text(
            SPARQL_QUERY_TOOL.name,
            format_sparql_result(response),
            meta={"endpoint": self._endpoint, "status": response.status},
        )


class AuthorsByDoiTool:
    """Looks up article authors by DOI. Satisfies ``ToolBackend``."""

    def __init__(self, endpoint: str, client: SparqlQuerier) -> None:
        self._endpoint = endpoint
        self._client = client

    @property
    def definition(self) -> ToolDef:
        return AUTHORS_BY_DOI_TOOL

    def invoke(self, arguments: dict[str, Any]) -> ToolCallResult:
        args = parse_arguments(AuthorsByDoiArgs, arguments, AUTHORS_BY_DOI_TOOL.name)
        doi = (args.doi or "").strip()
        if not doi:
            msg = 'Missing or empty "doi" argument for authorsByDoi.'
            raise InvalidParamsError(msg)

        response = self._client.query(self._endpoint, build_authors_by_doi_query(doi), True)
        return ToolCallResult.from_text(
            AUTHORS_BY_DOI_TOOL.name,
            format_authors_result(response),
            meta={"endpoint": self._endpoint, "status": response.status, "doi": doi},
        )
