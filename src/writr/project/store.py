"""Data-access protocol the tools call.

Lookups return ``None`` for a missing record and never raise for "not found";
tools turn ``None`` into a failed ToolResult themselves.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from writr.project.models import (
        Chapter,
        Character,
        CharacterRelationship,
        Location,
        OutlineGridCell,
        OutlineGridColumn,
        OutlineGridRow,
        Project,
        StyleGuideEntry,
        TimelineEvent,
        WorldbuildingDoc,
    )


@runtime_checkable
class ProjectStore(Protocol):
    """Async data access for one application's projects."""

    async def get_project(self, project_id: str) -> Project | None: ...

    # Characters
    async def create_character(self, project_id: str, **fields: Any) -> Character: ...
    async def get_character(self, character_id: str) -> Character | None: ...
    async def update_character(self, character_id: str, fields: dict[str, Any]) -> None: ...
    async def list_characters(self, project_id: str) -> list[Character]: ...
    async def list_relationships(self, project_id: str) -> list[CharacterRelationship]: ...

    # Locations
    async def create_location(self, project_id: str, **fields: Any) -> Location: ...
    async def get_location(self, location_id: str) -> Location | None: ...
    async def update_location(self, location_id: str, fields: dict[str, Any]) -> None: ...
    async def list_locations(self, project_id: str) -> list[Location]: ...

    # Timeline
    async def create_timeline_event(self, project_id: str, **fields: Any) -> TimelineEvent: ...
    async def get_timeline_event(self, event_id: str) -> TimelineEvent | None: ...
    async def update_timeline_event(self, event_id: str, fields: dict[str, Any]) -> None: ...
    async def list_timeline_events(self, project_id: str) -> list[TimelineEvent]: ...

    # Chapters
    async def create_chapter(self, project_id: str, **fields: Any) -> Chapter: ...
    async def get_chapter(self, chapter_id: str) -> Chapter | None: ...
    async def update_chapter(self, chapter_id: str, fields: dict[str, Any]) -> None: ...
    async def list_chapters(self, project_id: str) -> list[Chapter]: ...

    # Reference material
    async def get_style_guide_entry(self, entry_id: str) -> StyleGuideEntry | None: ...
    async def list_style_guide(self, project_id: str) -> list[StyleGuideEntry]: ...
    async def get_worldbuilding_doc(self, doc_id: str) -> WorldbuildingDoc | None: ...
    async def list_worldbuilding_docs(self, project_id: str) -> list[WorldbuildingDoc]: ...

    # Outline grid
    async def list_outline_columns(self, project_id: str) -> list[OutlineGridColumn]: ...
    async def list_outline_rows(self, project_id: str) -> list[OutlineGridRow]: ...
    async def list_outline_cells(self, project_id: str) -> list[OutlineGridCell]: ...
