"""RequestDispatcher — classifies inbound envelopes and routes requests.

Notifications (no ``id``) and stray responses are dropped; every request gets
exactly one response envelope carrying either ``result`` or ``error``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from sparqlmcp.protocol.errors import (
    InternalError,
    InvalidRequestError,
    MethodNotFoundError,
    NotImplementedFeatureError,
    RpcError,
)
from sparqlmcp.protocol.models import JsonRpcRequest, JsonRpcResponse, RequestId
from sparqlmcp.utils.telemetry import ATTR_ERROR_CODE, request_span

if TYPE_CHECKING:
    from sparqlmcp.config import ServerConfig
    from sparqlmcp.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

Handler = Callable[[dict[str, Any]], Any]


class RequestDispatcher:
    """Maintains a method-name-to-handler table and builds responses.

    Usage::

        dispatcher = RequestDispatcher(registry, config)
        response = dispatcher.handle(message)   # None for notifications
        if response is not None:
            transport.send(response)
    """

    def __init__(self, registry: ToolRegistry, config: ServerConfig) -> None:
        self._registry = registry
        self._config = config
        self._handlers: dict[str, Handler] = {
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._tools_list,
            "tools/call": self._tools_call,
            "resources/list": self._resources_list,
            "resources/read": self._resources_read,
        }

    @property
    def methods(self) -> list[str]:
        return list(self._handlers)

    def handle(self, message: Any) -> JsonRpcResponse | None:
        """Classify one decoded message and return its response, if any."""
        if not isinstance(message, dict):
            logger.warning("Ignoring non-object message of type %s", type(message).__name__)
            return None

        if message.get("id") is None:
            if "method" in message:
                logger.info("Received notification: %s", message["method"])
            else:
                logger.warning("Ignoring message with neither id nor method")
            return None

        if "method" not in message:
            logger.warning("Ignoring unexpected response message (id=%r)", message["id"])
            return None

        try:
            request = JsonRpcRequest.model_validate(message)
        except ValidationError:
            error = InvalidRequestError("Invalid Request").to_error()
            return JsonRpcResponse(id=_echoable_id(message["id"]), error=error)

        return self.dispatch(request)

    def dispatch(self, request: JsonRpcRequest) -> JsonRpcResponse:
        """Run the handler for *request* and wrap its outcome."""
        params = request.params if isinstance(request.params, dict) else {}
        with request_span(request.method, request.id) as span:
            logger.debug("Handling method: %s", request.method)
            try:
                handler = self._handlers.get(request.method)
                if handler is None:
                    raise MethodNotFoundError(request.method)
                result = handler(params)
            except RpcError as exc:
                span.set_attribute(ATTR_ERROR_CODE, exc.code)
                return JsonRpcResponse(id=request.id, error=exc.to_error())
            except Exception:
                logger.exception("Handler for %s failed", request.method)
                error = InternalError()
                span.set_attribute(ATTR_ERROR_CODE, error.code)
                return JsonRpcResponse(id=request.id, error=error.to_error())
        return JsonRpcResponse(id=request.id, result=result)

    # -- handlers -----------------------------------------------------------

    def _initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        protocol_version = params.get("protocolVersion") or self._config.default_protocol_version
        return {
            "protocolVersion": protocol_version,
            "serverInfo": {
                "name": self._config.server_name,
                "version": self._config.server_version,
            },
            "capabilities": {
                "tools": {"list": True, "call": True},
                "resources": {"list": True, "read": False, "subscribe": False},
            },
        }

    def _ping(self, _params: dict[str, Any]) -> dict[str, Any]:
        return {"ok": True}

    def _tools_list(self, _params: dict[str, Any]) -> dict[str, Any]:
        return {"tools": [tool.to_wire() for tool in self._registry.list_tools()]}

    def _tools_call(self, params: dict[str, Any]) -> dict[str, Any]:
        # ``toolName`` is accepted for older clients.
        name = params.get("name", params.get("toolName"))
        arguments = params.get("arguments") or {}
        return self._registry.invoke(name, arguments).to_wire()

    def _resources_list(self, _params: dict[str, Any]) -> dict[str, Any]:
        return {"resources": []}

    def _resources_read(self, _params: dict[str, Any]) -> dict[str, Any]:
        msg = "No resources are implemented by this server."
        raise NotImplementedFeatureError(msg)


def _echoable_id(raw_id: Any) -> RequestId | None:
    """Return *raw_id* if it is a usable JSON-RPC id, else ``None``."""
    if isinstance(raw_id, bool) or not isinstance(raw_id, int | float | str):
        return None
    return raw_id
