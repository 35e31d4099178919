"""Tool result, execution context and definition types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from writr.tools.schema import to_parameters_schema

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from pydantic import BaseModel

    from writr.project.store import ProjectStore

ToolCallStatus = Literal["pending", "approved", "denied", "executed", "error"]


@dataclass(frozen=True)
class ToolResult:
    success: bool
    message: str
    data: dict[str, Any] | None = None


@dataclass(frozen=True)
class ToolExecutionContext:
    """Where a tool runs: the active project and the store it reads and writes."""

    project_id: str
    store: ProjectStore


@dataclass(frozen=True)
class ToolDefinition:
    """A callable tool.

    ``params_model`` validates raw arguments and is the single source of
    ``parameters``, the model-facing JSON schema. ``requires_approval`` is
    static: read-only tools are ``False``, anything that writes is ``True``.
    """

    id: str
    name: str
    description: str
    parameters: dict[str, Any]
    params_model: type[BaseModel]
    requires_approval: bool
    execute: Callable[[Any, ToolExecutionContext], Awaitable[ToolResult]]


def define_tool(
    id: str,
    name: str,
    description: str,
    params_model: type[BaseModel],
    *,
    requires_approval: bool = False,
) -> Callable[[Callable[[Any, ToolExecutionContext], Awaitable[ToolResult]]], ToolDefinition]:
    """Decorator turning an async ``execute(params, context)`` into a ToolDefinition."""

    def decorator(
        fn: Callable[[Any, ToolExecutionContext], Awaitable[ToolResult]],
    ) -> ToolDefinition:
        return ToolDefinition(
            id=id,
            name=name,
            description=description,
            parameters=to_parameters_schema(params_model),
            params_model=params_model,
            requires_approval=requires_approval,
            execute=fn,
        )

    return decorator


def ok(message: str, data: dict[str, Any] | None = None) -> ToolResult:
    return ToolResult(success=True, message=message, data=data)


def fail(message: str) -> ToolResult:
    return ToolResult(success=False, message=message)
