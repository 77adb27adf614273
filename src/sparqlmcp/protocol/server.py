"""MCPServer — the synchronous read, dispatch, write loop.

One message is handled at a time, end to end. Malformed messages are logged
and dropped; only the end of the input stream stops the loop.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sparqlmcp.protocol.dispatcher import RequestDispatcher
from sparqlmcp.protocol.errors import EndOfStream, FramingError
from sparqlmcp.protocol.transport import FramedTransport

if TYPE_CHECKING:
    from sparqlmcp.config import ServerConfig
    from sparqlmcp.tools.sparql import SparqlQuerier

logger = logging.getLogger(__name__)


class MCPServer:
    """Serves one peer over a :class:`FramedTransport`.

    Usage::

        server = MCPServer.from_config(ServerConfig.from_env())
        server.serve_forever()   # returns at end of input
    """

    def __init__(self, transport: FramedTransport, dispatcher: RequestDispatcher) -> None:
        self._transport = transport
        self._dispatcher = dispatcher
        self._handled = 0
        self._dropped = 0

    @classmethod
    def from_config(
        cls,
        config: ServerConfig,
        *,
        transport: FramedTransport | None = None,
        client: SparqlQuerier | None = None,
    ) -> MCPServer:
        """Wire the default tool registry and a stdio transport."""
        from sparqlmcp.tools.registry import build_registry

        registry = build_registry(config, client)
        return cls(transport or FramedTransport.stdio(), RequestDispatcher(registry, config))

    @property
    def transport(self) -> FramedTransport:
        return self._transport

    @property
    def handled(self) -> int:
        """Number of responses written so far."""
        return self._handled

    @property
    def dropped(self) -> int:
        """Number of inbound messages discarded as malformed."""
        return self._dropped

    def serve_forever(self) -> None:
        logger.info("Entering main loop")
        while self.serve_one():
            pass
        logger.info(
            "Input closed, shutting down (%d handled, %d dropped)", self._handled, self._dropped
        )

    def serve_one(self) -> bool:
        """Process the next inbound message; return ``False`` at end of input."""
        try:
            message = self._transport.receive()
        except EndOfStream:
            return False
        except FramingError as exc:
            self._dropped += 1
            logger.warning("Dropping malformed message: %s", exc)
            return True

        response = self._dispatcher.handle(message)
        if response is not None:
            self._transport.send(response)
            self._handled += 1
        return True
