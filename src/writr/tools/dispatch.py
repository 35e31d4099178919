"""Run a model's tool calls with approval gating.

Each call moves ``pending -> approved | denied -> executed | error``. Calls
to read-only tools are approved implicitly; calls to tools flagged
``requires_approval`` go through the caller's ``approve`` callback first.
"""

from __future__ import annotations

from dataclasses import dataclass
import inspect
import json
import logging
from typing import TYPE_CHECKING

from writr.tools.registry import execute_tool, get_tool
from writr.tools.types import ToolResult, fail
from writr.types import Message

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from writr.tools.types import ToolCallStatus, ToolExecutionContext
    from writr.types import ToolCall

    ApproveCallback = Callable[["ToolCallEntry"], "bool | Awaitable[bool]"]

logger = logging.getLogger(__name__)

DENIED_MESSAGE = "The user declined this action."


@dataclass
class ToolCallEntry:
    """Mutable record of one tool call as it is approved and executed."""

    call: ToolCall
    requires_approval: bool
    status: ToolCallStatus = "pending"
    result: ToolResult | None = None

    def to_message(self) -> Message:
        """The ``tool`` message answering this call."""
        result = self.result or fail("Tool call was not executed.")
        payload: dict[str, object] = {"success": result.success, "message": result.message}
        if result.data is not None:
            payload["data"] = result.data
        return Message(role="tool", content=json.dumps(payload), tool_call_id=self.call.id)


def entry_for(call: ToolCall) -> ToolCallEntry:
    tool = get_tool(call.name)
    return ToolCallEntry(call=call, requires_approval=tool is not None and tool.requires_approval)


async def run_tool_call(
    entry: ToolCallEntry,
    context: ToolExecutionContext,
    approve: ApproveCallback | None = None,
) -> ToolCallEntry:
    """Advance *entry* to a terminal status. Without *approve*, gated calls are denied."""
    if entry.requires_approval:
        decision = approve(entry) if approve is not None else False
        if inspect.isawaitable(decision):
            decision = await decision
        entry.status = "approved" if decision else "denied"
    else:
        entry.status = "approved"

    if entry.status == "denied":
        logger.debug("Tool call %s (%s) denied", entry.call.id, entry.call.name)
        entry.result = fail(DENIED_MESSAGE)
        return entry

    entry.result = await execute_tool(entry.call.name, entry.call.arguments, context)
    entry.status = "executed" if entry.result.success else "error"
    return entry


async def dispatch_tool_calls(
    calls: Sequence[ToolCall],
    context: ToolExecutionContext,
    approve: ApproveCallback | None = None,
) -> list[Message]:
    """Run *calls* in order and return the ``tool`` messages to append to history."""
    messages: list[Message] = []
    for call in calls:
        entry = await run_tool_call(entry_for(call), context, approve)
        messages.append(entry.to_message())
    return messages
