"""Keyword search across a project's entities.

Matching is case-insensitive substring search. Each hit carries the first
matching field and a snippet centred on the match.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import math
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from pydantic import BaseModel

    from writr.project.store import ProjectStore

SearchableEntityType = Literal[
    "chapter",
    "character",
    "location",
    "timelineEvent",
    "styleGuideEntry",
    "worldbuildingDoc",
    "outlineCell",
]

ENTITY_TYPE_ORDER: tuple[SearchableEntityType, ...] = (
    "chapter",
    "character",
    "location",
    "timelineEvent",
    "styleGuideEntry",
    "worldbuildingDoc",
    "outlineCell",
)

SEARCHABLE_FIELDS: dict[str, tuple[str, ...]] = {
    "chapter": ("title", "content", "synopsis"),
    "character": (
        "name",
        "aliases",
        "description",
        "personality",
        "motivations",
        "backstory",
        "notes",
    ),
    "location": ("name", "description", "notes"),
    "timelineEvent": ("title", "description"),
    "styleGuideEntry": ("title", "content"),
    "worldbuildingDoc": ("title", "tags", "content"),
}

SNIPPET_CONTEXT_CHARS = 50
MAX_SNIPPET_LENGTH = 120


@dataclass(frozen=True)
class SearchResult:
    id: str
    entity_type: SearchableEntityType
    title: str
    snippet: str
    match_field: str
    subtitle: str | None = None


@dataclass(frozen=True)
class SearchPage:
    """One page of merged search results."""

    results: list[SearchResult]
    total_count: int
    page: int
    page_size: int
    total_pages: int


def extract_snippet(text: str, query: str) -> str:
    """Return text around the first match, or a capped prefix when absent."""
    if not text or not query:
        return ""
    match_index = text.lower().find(query.lower())
    if match_index == -1:
        return text[:MAX_SNIPPET_LENGTH] + ("..." if len(text) > MAX_SNIPPET_LENGTH else "")

    start = max(0, match_index - SNIPPET_CONTEXT_CHARS)
    end = min(len(text), match_index + len(query) + SNIPPET_CONTEXT_CHARS)
    snippet = text[start:end]
    if start > 0:
        snippet = f"...{snippet}"
    if end < len(text):
        snippet = f"{snippet}..."
    return snippet


def text_contains_query(text: str | Sequence[str] | None, query: str) -> bool:
    if not text or not query:
        return False
    needle = query.lower()
    if isinstance(text, str):
        return needle in text.lower()
    return any(needle in t.lower() for t in text)


def get_first_matching_field(
    entity: BaseModel | dict[str, Any],
    fields: Sequence[str],
    query: str,
) -> tuple[str, str] | None:
    """Return ``(field, matching_value)`` for the first field containing *query*.

    List-valued fields match on their first matching item.
    """
    needle = query.lower()
    for name in fields:
        value = entity.get(name) if isinstance(entity, dict) else getattr(entity, name, None)
        if isinstance(value, str) and needle in value.lower():
            return name, value
        if isinstance(value, list):
            for item in value:
                if isinstance(item, str) and needle in item.lower():
                    return name, item
    return None


def _match_entities(
    entities: Sequence[BaseModel],
    entity_type: SearchableEntityType,
    query: str,
    title_field: str,
    subtitle_field: str | None = None,
) -> list[SearchResult]:
    results: list[SearchResult] = []
    for entity in entities:
        match = get_first_matching_field(entity, SEARCHABLE_FIELDS[entity_type], query)
        if match is None:
            continue
        field_name, value = match
        results.append(
            SearchResult(
                id=entity.id,  # type: ignore[attr-defined]
                entity_type=entity_type,
                title=getattr(entity, title_field),
                subtitle=getattr(entity, subtitle_field) if subtitle_field else None,
                snippet=extract_snippet(value, query),
                match_field=field_name,
            )
        )
    return results


async def _search_outline_cells(
    store: ProjectStore, project_id: str, query: str
) -> list[SearchResult]:
    cells, rows, columns = await asyncio.gather(
        store.list_outline_cells(project_id),
        store.list_outline_rows(project_id),
        store.list_outline_columns(project_id),
    )
    row_map = {r.id: r for r in rows}
    column_map = {c.id: c for c in columns}

    results: list[SearchResult] = []
    for cell in cells:
        if not text_contains_query(cell.content, query):
            continue
        row = row_map.get(cell.row_id)
        column = column_map.get(cell.column_id)
        if row is None or column is None:
            continue
        row_label = row.label or f"Row {row.order + 1}"
        results.append(
            SearchResult(
                id=cell.id,
                entity_type="outlineCell",
                title=f"{row_label} - {column.title}",
                subtitle=column.title,
                snippet=extract_snippet(cell.content, query),
                match_field="content",
            )
        )
    return results


def _searchers(
    store: ProjectStore,
) -> dict[str, Callable[[str, str], Awaitable[list[SearchResult]]]]:
    async def chapters(pid: str, q: str) -> list[SearchResult]:
        return _match_entities(await store.list_chapters(pid), "chapter", q, "title")

    async def characters(pid: str, q: str) -> list[SearchResult]:
        return _match_entities(
            await store.list_characters(pid), "character", q, "name", "role"
        )

    async def locations(pid: str, q: str) -> list[SearchResult]:
        return _match_entities(await store.list_locations(pid), "location", q, "name")

    async def timeline(pid: str, q: str) -> list[SearchResult]:
        return _match_entities(
            await store.list_timeline_events(pid), "timelineEvent", q, "title"
        )

    async def style_guide(pid: str, q: str) -> list[SearchResult]:
        return _match_entities(
            await store.list_style_guide(pid), "styleGuideEntry", q, "title", "category"
        )

    async def worldbuilding(pid: str, q: str) -> list[SearchResult]:
        return _match_entities(
            await store.list_worldbuilding_docs(pid), "worldbuildingDoc", q, "title"
        )

    async def outline(pid: str, q: str) -> list[SearchResult]:
        return await _search_outline_cells(store, pid, q)

    return {
        "chapter": chapters,
        "character": characters,
        "location": locations,
        "timelineEvent": timeline,
        "styleGuideEntry": style_guide,
        "worldbuildingDoc": worldbuilding,
        "outlineCell": outline,
    }


async def search_project(
    store: ProjectStore,
    project_id: str,
    query: str,
    page: int = 1,
    page_size: int = 20,
    entity_types: Sequence[SearchableEntityType] | None = None,
) -> SearchPage:
    """Search every entity table and return one page of merged results."""
    if not query.strip():
        return SearchPage(results=[], total_count=0, page=page, page_size=page_size, total_pages=0)

    searchers = _searchers(store)
    types_to_search = list(entity_types) if entity_types else list(ENTITY_TYPE_ORDER)
    per_type = await asyncio.gather(
        *(searchers[t](project_id, query) for t in types_to_search)
    )
    all_results = [r for results in per_type for r in results]

    total_count = len(all_results)
    start = (page - 1) * page_size
    return SearchPage(
        results=all_results[start : start + page_size],
        total_count=total_count,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total_count / page_size),
    )
