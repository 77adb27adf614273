"""Server configuration — SPARQL endpoint, timeouts and server identity."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from pydantic import BaseModel, Field

from sparqlmcp import __version__

logger = logging.getLogger(__name__)

ENDPOINT_ENV = "SPARQL_ENDPOINT"
TIMEOUT_ENV = "SPARQL_TIMEOUT"
FALLBACK_ENDPOINT = "https://example.org/sparql"
DEFAULT_PROTOCOL_VERSION = "2025-06-18"


class ServerConfig(BaseModel):
    """Settings for one server process.

    Build it with :meth:`from_env` to honour ``SPARQL_ENDPOINT`` and
    ``SPARQL_TIMEOUT``; explicit keyword arguments win over the environment.
    """

    sparql_endpoint: str = FALLBACK_ENDPOINT
    sparql_timeout: float = Field(default=20.0, gt=0)
    server_name: str = "sparql-mcp"
    server_version: str = __version__
    default_protocol_version: str = DEFAULT_PROTOCOL_VERSION

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: object,
    ) -> ServerConfig:
        env = os.environ if environ is None else environ
        values: dict[str, object] = {"sparql_endpoint": env.get(ENDPOINT_ENV) or FALLBACK_ENDPOINT}

        raw_timeout = env.get(TIMEOUT_ENV)
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                logger.warning("Ignoring unparsable %s=%r", TIMEOUT_ENV, raw_timeout)
            else:
                if timeout > 0:
                    values["sparql_timeout"] = timeout
                else:
                    logger.warning("Ignoring non-positive %s=%r", TIMEOUT_ENV, raw_timeout)

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(values)
