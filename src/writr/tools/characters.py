"""Character tools."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field

from writr.project.models import CharacterRole
from writr.tools.schema import NoParams, ToolParams
from writr.tools.types import ToolResult, define_tool, fail, ok

if TYPE_CHECKING:
    from writr.tools.types import ToolExecutionContext


class CreateCharacterParams(ToolParams):
    name: str = Field(min_length=1, description="Character name")
    role: CharacterRole | None = Field(default=None, description="Character role")
    description: str | None = Field(default=None, description="Brief description")
    personality: str | None = Field(default=None, description="Personality traits")
    backstory: str | None = Field(default=None, description="Character backstory")


class CharacterIdParams(ToolParams):
    id: str = Field(min_length=1, description="Character ID")


class UpdateCharacterParams(ToolParams):
    id: str = Field(min_length=1, description="Character ID")
    name: str | None = Field(default=None, description="New name")
    role: CharacterRole | None = Field(default=None, description="New role")
    description: str | None = Field(default=None, description="New description")
    personality: str | None = Field(default=None, description="New personality")
    backstory: str | None = Field(default=None, description="New backstory")
    motivations: str | None = Field(default=None, description="New motivations")
    strengths: str | None = Field(default=None, description="New strengths")
    weaknesses: str | None = Field(default=None, description="New weaknesses")
    dialogue_style: str | None = Field(
        default=None, alias="dialogueStyle", description="New dialogue style"
    )


@define_tool(
    "create_character",
    "Create Character",
    "Create a new character in the story bible. Use when the user asks to add a character.",
    CreateCharacterParams,
    requires_approval=True,
)
async def create_character(
    params: CreateCharacterParams, context: ToolExecutionContext
) -> ToolResult:
    character = await context.store.create_character(
        context.project_id, **params.model_dump(exclude_none=True)
    )
    return ok(
        f'Created character "{character.name}"',
        {"id": character.id, "name": character.name},
    )


@define_tool(
    "get_character",
    "Get Character",
    "Look up a character by ID. Use after list_characters to get full details.",
    CharacterIdParams,
)
async def get_character(params: CharacterIdParams, context: ToolExecutionContext) -> ToolResult:
    character = await context.store.get_character(params.id)
    if character is None:
        return fail(f"Character not found: {params.id}")
    return ok(
        f'Found character "{character.name}"',
        {
            "id": character.id,
            "name": character.name,
            "role": character.role,
            "pronouns": character.pronouns,
            "description": character.description,
            "personality": character.personality,
            "motivations": character.motivations,
            "backstory": character.backstory,
            "strengths": character.strengths,
            "weaknesses": character.weaknesses,
            "dialogueStyle": character.dialogue_style,
            "aliases": list(character.aliases),
        },
    )


@define_tool(
    "update_character",
    "Update Character",
    "Update fields on an existing character. Only include fields to change.",
    UpdateCharacterParams,
    requires_approval=True,
)
async def update_character(
    params: UpdateCharacterParams, context: ToolExecutionContext
) -> ToolResult:
    existing = await context.store.get_character(params.id)
    if existing is None:
        return fail(f"Character not found: {params.id}")
    fields = params.model_dump(exclude_none=True, exclude={"id"})
    await context.store.update_character(params.id, fields)
    return ok(f'Updated character "{existing.name}"')


@define_tool(
    "list_characters",
    "List Characters",
    "List all characters in the project with their names, IDs, and roles. "
    "Use this to find character IDs before calling get_character or update_character.",
    NoParams,
)
async def list_characters(_params: NoParams, context: ToolExecutionContext) -> ToolResult:
    characters = await context.store.list_characters(context.project_id)
    return ok(
        f"Found {len(characters)} characters",
        {"characters": [{"id": c.id, "name": c.name, "role": c.role} for c in characters]},
    )


TOOLS = [create_character, get_character, update_character, list_characters]
