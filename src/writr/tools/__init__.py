"""Model-callable tools over project data."""

from .dispatch import ToolCallEntry, dispatch_tool_calls, run_tool_call
from .registry import (
    AI_TOOL_MAP,
    AI_TOOLS,
    execute_tool,
    get_tool,
    get_tool_definitions_for_model,
)
from .schema import ToolParams, to_parameters_schema
from .types import (
    ToolCallStatus,
    ToolDefinition,
    ToolExecutionContext,
    ToolResult,
    define_tool,
)

__all__ = [
    "AI_TOOLS",
    "AI_TOOL_MAP",
    "ToolCallEntry",
    "ToolCallStatus",
    "ToolDefinition",
    "ToolExecutionContext",
    "ToolParams",
    "ToolResult",
    "define_tool",
    "dispatch_tool_calls",
    "execute_tool",
    "get_tool",
    "get_tool_definitions_for_model",
    "run_tool_call",
    "to_parameters_schema",
]
