"""Domain entities the tools and prompt builder read and write."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal
import uuid

from pydantic import BaseModel, Field

ChapterStatus = Literal["draft", "revised", "final"]
CharacterRole = Literal["protagonist", "antagonist", "supporting", "minor"]
RelationshipType = Literal["parent", "child", "spouse", "divorced", "sibling", "custom"]
StyleGuideCategory = Literal["voice", "pov", "tense", "formatting", "vocabulary", "custom"]


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Entity(BaseModel):
    """Fields shared by every stored record."""

    id: str = Field(default_factory=new_id)
    project_id: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    model_config = {"validate_assignment": True}


class Project(BaseModel):
    id: str = Field(default_factory=new_id)
    title: str = Field(min_length=1)
    description: str = ""
    genre: str = ""
    target_word_count: int = Field(default=0, ge=0)


class Chapter(Entity):
    title: str = Field(min_length=1)
    order: int = Field(default=0, ge=0)
    content: str = ""
    synopsis: str = ""
    status: ChapterStatus = "draft"
    word_count: int = Field(default=0, ge=0)


class Character(Entity):
    name: str = Field(min_length=1)
    role: CharacterRole = "supporting"
    pronouns: str = ""
    aliases: list[str] = Field(default_factory=list)
    description: str = ""
    personality: str = ""
    motivations: str = ""
    internal_conflict: str = ""
    strengths: str = ""
    weaknesses: str = ""
    character_arcs: str = ""
    dialogue_style: str = ""
    backstory: str = ""
    notes: str = ""
    linked_character_ids: list[str] = Field(default_factory=list)
    linked_location_ids: list[str] = Field(default_factory=list)


class CharacterRelationship(Entity):
    source_character_id: str
    target_character_id: str
    type: RelationshipType
    custom_label: str = ""


class Location(Entity):
    name: str = Field(min_length=1)
    description: str = ""
    parent_location_id: str | None = None
    notes: str = ""
    linked_character_ids: list[str] = Field(default_factory=list)


class TimelineEvent(Entity):
    title: str = Field(min_length=1)
    description: str = ""
    date: str = ""
    order: int = Field(default=0, ge=0)
    linked_chapter_ids: list[str] = Field(default_factory=list)
    linked_character_ids: list[str] = Field(default_factory=list)


class StyleGuideEntry(Entity):
    category: StyleGuideCategory = "custom"
    title: str = Field(min_length=1)
    content: str = ""
    order: int = Field(default=0, ge=0)


class WorldbuildingDoc(Entity):
    title: str = Field(min_length=1)
    content: str = ""
    tags: list[str] = Field(default_factory=list)
    parent_doc_id: str | None = None
    order: int = Field(default=0, ge=0)
    linked_character_ids: list[str] = Field(default_factory=list)
    linked_location_ids: list[str] = Field(default_factory=list)


class OutlineGridColumn(Entity):
    title: str
    order: int = Field(default=0, ge=0)
    width: int = 200


class OutlineGridRow(Entity):
    label: str = ""
    order: int = Field(default=0, ge=0)
    linked_chapter_id: str | None = None


class OutlineGridCell(Entity):
    row_id: str
    column_id: str
    content: str = ""
    color: str = "white"


def count_words(text: str) -> int:
    """Whitespace-delimited word count."""
    return len(text.split())
