"""ToolBackend protocol — the common interface for every tool implementation.

Each backend describes itself with a :class:`ToolDef` and turns an arguments
mapping into a :class:`ToolCallResult`, so the :class:`ToolRegistry` can route
``tools/call`` requests without knowing what the tool does.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

from pydantic import BaseModel, ValidationError

from sparqlmcp.protocol.errors import InvalidParamsError

if TYPE_CHECKING:
    from sparqlmcp.protocol.models import ToolCallResult, ToolDef

ArgsT = TypeVar("ArgsT", bound=BaseModel)


@runtime_checkable
class ToolBackend(Protocol):
    """Executes one named tool."""

    @property
    def definition(self) -> ToolDef:
        """The descriptor advertised through ``tools/list``."""
        ...

    def invoke(self, arguments: dict[str, Any]) -> ToolCallResult:
        """Run the tool.

        Raises :class:`~sparqlmcp.protocol.errors.InvalidParamsError` when the
        arguments are unusable. Upstream failures are reported in the result
        text, not raised.
        """
        ...


def parse_arguments(model: type[ArgsT], arguments: dict[str, Any], tool_name: str) -> ArgsT:
    """Validate *arguments* against *model*, mapping failures to ``-32602``."""
    try:
        return model.model_validate(arguments)
    except ValidationError as exc:
        fields = sorted({".".join(str(p) for p in err["loc"]) or "arguments" for err in exc.errors()})
        msg = f"Invalid arguments for {tool_name}: {', '.join(fields)}"
        raise InvalidParamsError(msg) from exc
