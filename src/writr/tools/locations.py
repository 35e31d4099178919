"""Location tools."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field

from writr.tools.schema import NoParams, ToolParams
from writr.tools.types import ToolResult, define_tool, fail, ok

if TYPE_CHECKING:
    from writr.tools.types import ToolExecutionContext


class CreateLocationParams(ToolParams):
    name: str = Field(min_length=1, description="Location name")
    description: str | None = Field(default=None, description="Location description")
    notes: str | None = Field(default=None, description="Additional notes")


class LocationIdParams(ToolParams):
    id: str = Field(min_length=1, description="Location ID")


class UpdateLocationParams(ToolParams):
    id: str = Field(min_length=1, description="Location ID")
    name: str | None = Field(default=None, description="New name")
    description: str | None = Field(default=None, description="New description")
    notes: str | None = Field(default=None, description="New notes")


@define_tool(
    "create_location",
    "Create Location",
    "Create a new location in the story bible. Use when the user asks to add a setting or place.",
    CreateLocationParams,
    requires_approval=True,
)
async def create_location(
    params: CreateLocationParams, context: ToolExecutionContext
) -> ToolResult:
    location = await context.store.create_location(
        context.project_id, **params.model_dump(exclude_none=True)
    )
    return ok(
        f'Created location "{location.name}"',
        {"id": location.id, "name": location.name},
    )


@define_tool(
    "get_location",
    "Get Location",
    "Look up a location by ID to get full details.",
    LocationIdParams,
)
async def get_location(params: LocationIdParams, context: ToolExecutionContext) -> ToolResult:
    location = await context.store.get_location(params.id)
    if location is None:
        return fail(f"Location not found: {params.id}")
    return ok(
        f'Found location "{location.name}"',
        {
            "id": location.id,
            "name": location.name,
            "description": location.description,
            "notes": location.notes,
        },
    )


@define_tool(
    "update_location",
    "Update Location",
    "Update fields on an existing location. Only include fields to change.",
    UpdateLocationParams,
    requires_approval=True,
)
async def update_location(
    params: UpdateLocationParams, context: ToolExecutionContext
) -> ToolResult:
    existing = await context.store.get_location(params.id)
    if existing is None:
        return fail(f"Location not found: {params.id}")
    await context.store.update_location(
        params.id, params.model_dump(exclude_none=True, exclude={"id"})
    )
    return ok(f'Updated location "{existing.name}"')


@define_tool(
    "list_locations",
    "List Locations",
    "List all locations in the project with their names and IDs. "
    "Use this to discover location IDs before calling get_location.",
    NoParams,
)
async def list_locations(_params: NoParams, context: ToolExecutionContext) -> ToolResult:
    locations = await context.store.list_locations(context.project_id)
    return ok(
        f"Found {len(locations)} locations",
        {"locations": [{"id": loc.id, "name": loc.name} for loc in locations]},
    )


TOOLS = [create_location, get_location, update_location, list_locations]
