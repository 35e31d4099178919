"""Timeline event tools."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field

from writr.tools.schema import NoParams, ToolParams
from writr.tools.types import ToolResult, define_tool, fail, ok

if TYPE_CHECKING:
    from writr.tools.types import ToolExecutionContext


class CreateTimelineEventParams(ToolParams):
    title: str = Field(min_length=1, description="Event title")
    description: str | None = Field(default=None, description="Event description")
    date: str | None = Field(default=None, description="In-story date (freeform string)")


class TimelineEventIdParams(ToolParams):
    id: str = Field(min_length=1, description="Timeline event ID")


class UpdateTimelineEventParams(ToolParams):
    id: str = Field(min_length=1, description="Timeline event ID")
    title: str | None = Field(default=None, description="New title")
    description: str | None = Field(default=None, description="New description")
    date: str | None = Field(default=None, description="New date")


@define_tool(
    "create_timeline_event",
    "Create Timeline Event",
    "Add a timeline event. Use when the user asks to add events or plot points.",
    CreateTimelineEventParams,
    requires_approval=True,
)
async def create_timeline_event(
    params: CreateTimelineEventParams, context: ToolExecutionContext
) -> ToolResult:
    event = await context.store.create_timeline_event(
        context.project_id, **params.model_dump(exclude_none=True)
    )
    return ok(
        f'Created timeline event "{event.title}"',
        {"id": event.id, "title": event.title},
    )


@define_tool(
    "get_timeline_event",
    "Get Timeline Event",
    "Look up a timeline event by ID to get full details.",
    TimelineEventIdParams,
)
async def get_timeline_event(
    params: TimelineEventIdParams, context: ToolExecutionContext
) -> ToolResult:
    event = await context.store.get_timeline_event(params.id)
    if event is None:
        return fail(f"Timeline event not found: {params.id}")
    return ok(
        f'Found event "{event.title}"',
        {
            "id": event.id,
            "title": event.title,
            "description": event.description,
            "date": event.date,
        },
    )


@define_tool(
    "update_timeline_event",
    "Update Timeline Event",
    "Update fields on an existing timeline event. Only include fields to change.",
    UpdateTimelineEventParams,
    requires_approval=True,
)
async def update_timeline_event(
    params: UpdateTimelineEventParams, context: ToolExecutionContext
) -> ToolResult:
    existing = await context.store.get_timeline_event(params.id)
    if existing is None:
        return fail(f"Timeline event not found: {params.id}")
    await context.store.update_timeline_event(
        params.id, params.model_dump(exclude_none=True, exclude={"id"})
    )
    return ok(f'Updated event "{existing.title}"')


@define_tool(
    "list_timeline_events",
    "List Timeline Events",
    "List all timeline events in the project with their titles, dates, and IDs. "
    "Use this to discover event IDs before calling get_timeline_event.",
    NoParams,
)
async def list_timeline_events(_params: NoParams, context: ToolExecutionContext) -> ToolResult:
    events = await context.store.list_timeline_events(context.project_id)
    return ok(
        f"Found {len(events)} timeline events",
        {"events": [{"id": e.id, "title": e.title, "date": e.date} for e in events]},
    )


TOOLS = [create_timeline_event, get_timeline_event, update_timeline_event, list_timeline_events]
