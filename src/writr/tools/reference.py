"""Read-only reference tools: project search, style guide, worldbuilding, outline."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from pydantic import Field

from writr.project.search import SearchableEntityType, search_project
from writr.prompts.serialize import build_name_map, serialize_outline_grid
from writr.tools.schema import NoParams, ToolParams
from writr.tools.types import ToolResult, define_tool, fail, ok

if TYPE_CHECKING:
    from writr.tools.types import ToolExecutionContext

SEARCH_PAGE_SIZE = 20


class SearchProjectParams(ToolParams):
    query: str = Field(min_length=1, description="Search phrase or keyword")
    entity_types: list[SearchableEntityType] | None = Field(
        default=None,
        description="Optional filter to search only specific entity types",
    )


class StyleGuideEntryIdParams(ToolParams):
    id: str = Field(min_length=1, description="Style guide entry ID")


class WorldbuildingDocIdParams(ToolParams):
    id: str = Field(min_length=1, description="Worldbuilding doc ID")


@define_tool(
    "search_project",
    "Search Project",
    "Search across the entire project for a keyword or phrase. "
    "Returns matches from chapters, characters, locations, timeline events, "
    "style guide, worldbuilding docs, and outline cells. "
    "Each result includes the entity type, title, matching field, and a text snippet. "
    "Use this for broad discovery before drilling into specific entities with get_* tools.",
    SearchProjectParams,
)
async def search_project_tool(
    params: SearchProjectParams, context: ToolExecutionContext
) -> ToolResult:
    page = await search_project(
        context.store,
        context.project_id,
        params.query,
        page=1,
        page_size=SEARCH_PAGE_SIZE,
        entity_types=params.entity_types,
    )
    return ok(
        f'Found {page.total_count} results for "{params.query}"',
        {
            "results": [
                {
                    "id": r.id,
                    "entityType": r.entity_type,
                    "title": r.title,
                    "subtitle": r.subtitle,
                    "snippet": r.snippet,
                    "matchField": r.match_field,
                }
                for r in page.results
            ],
            "totalCount": page.total_count,
        },
    )


@define_tool(
    "list_style_guide",
    "List Style Guide",
    "List all style guide entries in the project with their titles, categories, and IDs. "
    "Use this to discover entry IDs before calling get_style_guide_entry.",
    NoParams,
)
async def list_style_guide(_params: NoParams, context: ToolExecutionContext) -> ToolResult:
    entries = await context.store.list_style_guide(context.project_id)
    return ok(
        f"Found {len(entries)} style guide entries",
        {"entries": [{"id": s.id, "title": s.title, "category": s.category} for s in entries]},
    )


@define_tool(
    "get_style_guide_entry",
    "Get Style Guide Entry",
    "Look up a style guide entry by ID to get its full content.",
    StyleGuideEntryIdParams,
)
async def get_style_guide_entry(
    params: StyleGuideEntryIdParams, context: ToolExecutionContext
) -> ToolResult:
    entry = await context.store.get_style_guide_entry(params.id)
    if entry is None:
        return fail(f"Style guide entry not found: {params.id}")
    return ok(
        f'Found style guide entry "{entry.title}"',
        {
            "id": entry.id,
            "title": entry.title,
            "category": entry.category,
            "content": entry.content,
        },
    )


@define_tool(
    "list_worldbuilding_docs",
    "List Worldbuilding Docs",
    "List all worldbuilding documents in the project with their titles, tags, parent doc "
    "IDs, and IDs. Use this to discover doc IDs before calling get_worldbuilding_doc.",
    NoParams,
)
async def list_worldbuilding_docs(_params: NoParams, context: ToolExecutionContext) -> ToolResult:
    docs = await context.store.list_worldbuilding_docs(context.project_id)
    return ok(
        f"Found {len(docs)} worldbuilding docs",
        {
            "docs": [
                {"id": d.id, "title": d.title, "tags": list(d.tags), "parentDocId": d.parent_doc_id}
                for d in docs
            ]
        },
    )


@define_tool(
    "get_worldbuilding_doc",
    "Get Worldbuilding Doc",
    "Look up a worldbuilding document by ID to get its full content.",
    WorldbuildingDocIdParams,
)
async def get_worldbuilding_doc(
    params: WorldbuildingDocIdParams, context: ToolExecutionContext
) -> ToolResult:
    doc = await context.store.get_worldbuilding_doc(params.id)
    if doc is None:
        return fail(f"Worldbuilding doc not found: {params.id}")
    return ok(
        f'Found worldbuilding doc "{doc.title}"',
        {
            "id": doc.id,
            "title": doc.title,
            "content": doc.content,
            "tags": list(doc.tags),
            "parentDocId": doc.parent_doc_id,
        },
    )


@define_tool(
    "get_outline",
    "Get Outline",
    "Get the full outline grid for the project, including columns, rows, and cell contents.",
    NoParams,
)
async def get_outline(_params: NoParams, context: ToolExecutionContext) -> ToolResult:
    store, pid = context.store, context.project_id
    columns, rows, cells, chapters = await asyncio.gather(
        store.list_outline_columns(pid),
        store.list_outline_rows(pid),
        store.list_outline_cells(pid),
        store.list_chapters(pid),
    )
    if not columns:
        return ok("No outline grid configured for this project.")
    chapter_names = build_name_map(chapters, lambda c: c.title)
    return ok(
        f"Outline: {len(columns)} columns, {len(rows)} rows",
        {"outline": serialize_outline_grid(columns, rows, cells, chapter_names)},
    )


TOOLS = [
    search_project_tool,
    list_style_guide,
    get_style_guide_entry,
    list_worldbuilding_docs,
    get_worldbuilding_doc,
    get_outline,
]
