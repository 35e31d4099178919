"""Tool catalog and executor.

``execute_tool`` is the boundary for tool failures: unknown ids, invalid
arguments and exceptions raised by a tool all come back as a failed
ToolResult. Nothing raises past it.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from writr.tools import chapters, characters, locations, reference, timeline
from writr.tools.schema import format_validation_error
from writr.tools.types import ToolDefinition, fail
from writr.types import ToolSpec

if TYPE_CHECKING:
    from writr.tools.types import ToolExecutionContext, ToolResult

logger = logging.getLogger(__name__)

AI_TOOLS: list[ToolDefinition] = [
    *characters.TOOLS,
    *locations.TOOLS,
    *timeline.TOOLS,
    chapters.create_chapter,
    chapters.get_chapter,
    chapters.update_chapter,
    chapters.search_chapters,
    reference.search_project_tool,
    chapters.list_chapters,
    chapters.read_chapter,
    chapters.read_chapter_range,
    chapters.search_chapter,
    chapters.get_chapter_structure,
    reference.list_style_guide,
    reference.get_style_guide_entry,
    reference.list_worldbuilding_docs,
    reference.get_worldbuilding_doc,
    reference.get_outline,
]

AI_TOOL_MAP: dict[str, ToolDefinition] = {t.id: t for t in AI_TOOLS}


def get_tool(tool_id: str) -> ToolDefinition | None:
    return AI_TOOL_MAP.get(tool_id)


def get_tool_definitions_for_model() -> list[ToolSpec]:
    """Return the model-facing descriptors for every registered tool."""
    return [
        ToolSpec(id=t.id, name=t.name, description=t.description, parameters=t.parameters)
        for t in AI_TOOLS
    ]


async def execute_tool(
    tool_id: str,
    params: Mapping[str, Any] | None,
    context: ToolExecutionContext,
) -> ToolResult:
    """Validate *params* and run the tool named *tool_id*.

    Approval is not enforced here; callers gate ``requires_approval`` tools
    before calling (see ``writr.tools.dispatch``).
    """
    tool = AI_TOOL_MAP.get(tool_id)
    if tool is None:
        logger.debug("Unknown tool requested: %s", tool_id)
        return fail(f"Unknown tool: {tool_id}")

    if params is None:
        params = {}
    elif not isinstance(params, Mapping):
        logger.debug("Non-object parameters for %s: %r", tool_id, params)
        return fail("Invalid parameters: expected an object")

    try:
        validated = tool.params_model.model_validate(dict(params))
    except ValidationError as e:
        reason = format_validation_error(e)
        logger.debug("Invalid parameters for %s: %s", tool_id, reason)
        return fail(f"Invalid parameters: {reason}")

    try:
        return await tool.execute(validated, context)
    except asyncio.CancelledError:
        raise
    except Exception as e:
        logger.warning("Tool %s failed: %s", tool_id, e, exc_info=True)
        return fail(str(e) or "Tool execution failed")
