"""In-memory ProjectStore for tests, scripts and mock mode."""

from __future__ import annotations

from typing import Any, TypeVar

from writr.project.models import (
    Chapter,
    Character,
    CharacterRelationship,
    Entity,
    Location,
    OutlineGridCell,
    OutlineGridColumn,
    OutlineGridRow,
    Project,
    StyleGuideEntry,
    TimelineEvent,
    WorldbuildingDoc,
    count_words,
    utcnow,
)

E = TypeVar("E", bound=Entity)


class InMemoryProjectStore:
    """Dict-backed store keyed by entity id.

    Returned entities are copies; callers mutate records only through the
    ``update_*`` methods.
    """

    def __init__(self) -> None:
        self.projects: dict[str, Project] = {}
        self._tables: dict[type[Entity], dict[str, Entity]] = {}

    # ------------------------------------------------------------------
    # Seeding helpers (synchronous)
    # ------------------------------------------------------------------

    def add_project(self, project: Project) -> Project:
        self.projects[project.id] = project
        return project

    def add(self, entity: E) -> E:
        """Insert or replace *entity* as-is."""
        if isinstance(entity, Chapter) and entity.content and not entity.word_count:
            entity = entity.model_copy(update={"word_count": count_words(entity.content)})
        self._table(type(entity))[entity.id] = entity
        return entity

    def _table(self, kind: type[E]) -> dict[str, E]:
        return self._tables.setdefault(kind, {})  # type: ignore[return-value]

    def _get(self, kind: type[E], entity_id: str) -> E | None:
        entity = self._table(kind).get(entity_id)
        return entity.model_copy(deep=True) if entity is not None else None

    def _list(self, kind: type[E], project_id: str) -> list[E]:
        items = [e for e in self._table(kind).values() if e.project_id == project_id]
        if items and hasattr(items[0], "order"):
            items.sort(key=lambda e: e.order)  # type: ignore[attr-defined]
        return [e.model_copy(deep=True) for e in items]

    def _next_order(self, kind: type[E], project_id: str) -> int:
        orders = [
            getattr(e, "order", 0)
            for e in self._table(kind).values()
            if e.project_id == project_id
        ]
        return max(orders) + 1 if orders else 0

    def _create(self, kind: type[E], project_id: str, fields: dict[str, Any]) -> E:
        clean = {k: v for k, v in fields.items() if v is not None}
        if "order" in kind.model_fields and "order" not in clean:
            clean["order"] = self._next_order(kind, project_id)
        entity = kind(project_id=project_id, **clean)
        return self.add(entity).model_copy(deep=True)

    def _update(self, kind: type[E], entity_id: str, fields: dict[str, Any]) -> None:
        table = self._table(kind)
        existing = table.get(entity_id)
        if existing is None:
            return
        update = {k: v for k, v in fields.items() if v is not None}
        if isinstance(existing, Chapter) and "content" in update:
            update["word_count"] = count_words(update["content"])
        update["updated_at"] = utcnow()
        table[entity_id] = kind.model_validate({**existing.model_dump(), **update})

    # ------------------------------------------------------------------
    # ProjectStore
    # ------------------------------------------------------------------

    async def get_project(self, project_id: str) -> Project | None:
        return self.projects.get(project_id)

    async def create_character(self, project_id: str, **fields: Any) -> Character:
        return self._create(Character, project_id, fields)

    async def get_character(self, character_id: str) -> Character | None:
        return self._get(Character, character_id)

    async def update_character(self, character_id: str, fields: dict[str, Any]) -> None:
        self._update(Character, character_id, fields)

    async def list_characters(self, project_id: str) -> list[Character]:
        return self._list(Character, project_id)

    async def list_relationships(self, project_id: str) -> list[CharacterRelationship]:
        return self._list(CharacterRelationship, project_id)

    async def create_location(self, project_id: str, **fields: Any) -> Location:
        return self._create(Location, project_id, fields)

    async def get_location(self, location_id: str) -> Location | None:
        return self._get(Location, location_id)

    async def update_location(self, location_id: str, fields: dict[str, Any]) -> None:
        self._update(Location, location_id, fields)

    async def list_locations(self, project_id: str) -> list[Location]:
        return self._list(Location, project_id)

    async def create_timeline_event(self, project_id: str, **fields: Any) -> TimelineEvent:
        return self._create(TimelineEvent, project_id, fields)

    async def get_timeline_event(self, event_id: str) -> TimelineEvent | None:
        return self._get(TimelineEvent, event_id)

    async def update_timeline_event(self, event_id: str, fields: dict[str, Any]) -> None:
        self._update(TimelineEvent, event_id, fields)

    async def list_timeline_events(self, project_id: str) -> list[TimelineEvent]:
        return self._list(TimelineEvent, project_id)

    async def create_chapter(self, project_id: str, **fields: Any) -> Chapter:
        return self._create(Chapter, project_id, fields)

    async def get_chapter(self, chapter_id: str) -> Chapter | None:
        return self._get(Chapter, chapter_id)

    async def update_chapter(self, chapter_id: str, fields: dict[str, Any]) -> None:
        self._update(Chapter, chapter_id, fields)

    async def list_chapters(self, project_id: str) -> list[Chapter]:
        return self._list(Chapter, project_id)

    async def get_style_guide_entry(self, entry_id: str) -> StyleGuideEntry | None:
        return self._get(StyleGuideEntry, entry_id)

    async def list_style_guide(self, project_id: str) -> list[StyleGuideEntry]:
        return self._list(StyleGuideEntry, project_id)

    async def get_worldbuilding_doc(self, doc_id: str) -> WorldbuildingDoc | None:
        return self._get(WorldbuildingDoc, doc_id)

    async def list_worldbuilding_docs(self, project_id: str) -> list[WorldbuildingDoc]:
        return self._list(WorldbuildingDoc, project_id)

    async def list_outline_columns(self, project_id: str) -> list[OutlineGridColumn]:
        return self._list(OutlineGridColumn, project_id)

    async def list_outline_rows(self, project_id: str) -> list[OutlineGridRow]:
        return self._list(OutlineGridRow, project_id)

    async def list_outline_cells(self, project_id: str) -> list[OutlineGridCell]:
        return self._list(OutlineGridCell, project_id)
