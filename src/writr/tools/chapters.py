"""Chapter tools, including the paragraph-level retrieval tools.

Long chapters are expensive to hand to a model whole. ``get_chapter`` reports
paragraph counts and whether scene breaks exist so the model can pick between
``read_chapter_range``, ``search_chapter`` and ``get_chapter_structure``.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from pydantic import Field

from writr.project.models import ChapterStatus
from writr.project.search import extract_snippet, text_contains_query
from writr.tools.schema import NoParams, ToolParams
from writr.tools.types import ToolResult, define_tool, fail, ok

if TYPE_CHECKING:
    from writr.tools.types import ToolExecutionContext

DEFAULT_RANGE_WINDOW = 20
MAX_RANGE_WINDOW = 50
MAX_SEARCH_MATCHES = 10
STRUCTURE_PREVIEW_LENGTH = 80

_PARAGRAPH_SPLIT_RE = re.compile(r"\n\n+")
SCENE_BREAK_RE = re.compile(r"[-*]{3,}|\*\s\*\s\*")


def split_paragraphs(content: str) -> list[str]:
    """Split on blank lines, dropping whitespace-only paragraphs."""
    return [p for p in _PARAGRAPH_SPLIT_RE.split(content) if p.strip()]


def is_scene_break(paragraph: str) -> bool:
    return SCENE_BREAK_RE.fullmatch(paragraph) is not None


def clamp_range(start: int, end: int | None, total: int) -> tuple[int, int]:
    """Clamp a requested 1-indexed inclusive range to the chapter.

    *end* defaults to a 20-paragraph window and never extends more than 50
    paragraphs past *start*.
    """
    start = max(1, min(start, total))
    raw_end = end if end is not None else start + DEFAULT_RANGE_WINDOW - 1
    end = max(start, min(raw_end, total, start + MAX_RANGE_WINDOW - 1))
    return start, end


def scene_spans(paragraphs: list[str]) -> list[dict[str, int | str]]:
    """Return ``{start, end, preview}`` for each scene between break markers."""
    scenes: list[dict[str, int | str]] = []
    scene_start = 1
    for i, paragraph in enumerate(paragraphs):
        if not is_scene_break(paragraph):
            continue
        if i > scene_start - 1:
            scenes.append(
                {
                    "start": scene_start,
                    "end": i,
                    "preview": paragraphs[scene_start - 1][:STRUCTURE_PREVIEW_LENGTH],
                }
            )
        scene_start = i + 2
    if scene_start <= len(paragraphs):
        scenes.append(
            {
                "start": scene_start,
                "end": len(paragraphs),
                "preview": paragraphs[scene_start - 1][:STRUCTURE_PREVIEW_LENGTH],
            }
        )
    return scenes


class CreateChapterParams(ToolParams):
    title: str = Field(min_length=1, description="Chapter title")
    synopsis: str | None = Field(default=None, description="Brief chapter synopsis")


class ChapterIdParams(ToolParams):
    id: str = Field(min_length=1, description="Chapter ID")


class UpdateChapterParams(ToolParams):
    id: str = Field(min_length=1, description="Chapter ID")
    title: str | None = Field(default=None, description="New title")
    synopsis: str | None = Field(default=None, description="New synopsis")
    status: ChapterStatus | None = Field(default=None, description="New status")


class SearchChaptersParams(ToolParams):
    query: str = Field(min_length=1, description="Search phrase")


class ReadChapterRangeParams(ToolParams):
    id: str = Field(min_length=1, description="Chapter ID")
    start: int = Field(ge=1, description="Start paragraph number (1-indexed)")
    end: int | None = Field(
        default=None,
        ge=1,
        description="End paragraph number (1-indexed, inclusive). Defaults to start + 19.",
    )


class SearchChapterParams(ToolParams):
    id: str = Field(min_length=1, description="Chapter ID")
    query: str = Field(min_length=1, description="Search keyword or phrase")
    context_paragraphs: int | None = Field(
        default=None,
        ge=0,
        le=3,
        description="Number of surrounding paragraphs to include (default 1, max 3)",
    )


@define_tool(
    "create_chapter",
    "Create Chapter",
    "Create a new chapter. Use when the user asks to add a chapter to the project.",
    CreateChapterParams,
    requires_approval=True,
)
async def create_chapter(params: CreateChapterParams, context: ToolExecutionContext) -> ToolResult:
    chapter = await context.store.create_chapter(
        context.project_id, **params.model_dump(exclude_none=True)
    )
    return ok(
        f'Created chapter "{chapter.title}"',
        {"id": chapter.id, "title": chapter.title},
    )


@define_tool(
    "get_chapter",
    "Get Chapter",
    "Look up a chapter by ID to get its title, synopsis, status, totalParagraphs, and "
    "hasSceneBreaks. Use totalParagraphs and hasSceneBreaks to decide which partial "
    "retrieval tool to use.",
    ChapterIdParams,
)
async def get_chapter(params: ChapterIdParams, context: ToolExecutionContext) -> ToolResult:
    chapter = await context.store.get_chapter(params.id)
    if chapter is None:
        return fail(f"Chapter not found: {params.id}")
    paragraphs = split_paragraphs(chapter.content)
    return ok(
        f'Found chapter "{chapter.title}"',
        {
            "id": chapter.id,
            "title": chapter.title,
            "synopsis": chapter.synopsis,
            "status": chapter.status,
            "wordCount": chapter.word_count,
            "totalParagraphs": len(paragraphs),
            "hasSceneBreaks": any(is_scene_break(p) for p in paragraphs),
        },
    )


@define_tool(
    "update_chapter",
    "Update Chapter",
    "Update a chapter's title, synopsis, or status. Only include fields to change.",
    UpdateChapterParams,
    requires_approval=True,
)
async def update_chapter(params: UpdateChapterParams, context: ToolExecutionContext) -> ToolResult:
    existing = await context.store.get_chapter(params.id)
    if existing is None:
        return fail(f"Chapter not found: {params.id}")
    await context.store.update_chapter(
        params.id, params.model_dump(exclude_none=True, exclude={"id"})
    )
    return ok(f'Updated chapter "{existing.title}"')


@define_tool(
    "search_chapters",
    "Search Chapters",
    "Search chapter content by a phrase or keyword. "
    "Returns matching chapter titles, IDs, and snippets.",
    SearchChaptersParams,
)
async def search_chapters(
    params: SearchChaptersParams, context: ToolExecutionContext
) -> ToolResult:
    chapters = await context.store.list_chapters(context.project_id)
    matches = [
        {
            "id": ch.id,
            "title": ch.title,
            "snippet": extract_snippet(ch.content, params.query),
        }
        for ch in chapters
        if text_contains_query(ch.title, params.query)
        or text_contains_query(ch.content, params.query)
    ]
    return ok(f"Found {len(matches)} matching chapters", {"matches": matches})


@define_tool(
    "list_chapters",
    "List Chapters",
    "List all chapters in the project with their titles, IDs, statuses, and word counts. "
    "Use this to discover chapter IDs before calling get_chapter or read_chapter.",
    NoParams,
)
async def list_chapters(_params: NoParams, context: ToolExecutionContext) -> ToolResult:
    chapters = await context.store.list_chapters(context.project_id)
    return ok(
        f"Found {len(chapters)} chapters",
        {
            "chapters": [
                {"id": c.id, "title": c.title, "status": c.status, "wordCount": c.word_count}
                for c in chapters
            ]
        },
    )


@define_tool(
    "read_chapter",
    "Read Chapter",
    "Read the full markdown content of a chapter by ID. "
    "For large chapters, prefer read_chapter_range or search_chapter to reduce token usage.",
    ChapterIdParams,
)
async def read_chapter(params: ChapterIdParams, context: ToolExecutionContext) -> ToolResult:
    chapter = await context.store.get_chapter(params.id)
    if chapter is None:
        return fail(f"Chapter not found: {params.id}")
    return ok(
        f'Chapter "{chapter.title}" ({chapter.word_count} words)',
        {"id": chapter.id, "title": chapter.title, "content": chapter.content},
    )


@define_tool(
    "read_chapter_range",
    "Read Chapter Range",
    "Read a range of paragraphs from a chapter (1-indexed, inclusive). "
    "Default window is 20 paragraphs, max 50. Use after get_chapter to read specific sections.",
    ReadChapterRangeParams,
)
async def read_chapter_range(
    params: ReadChapterRangeParams, context: ToolExecutionContext
) -> ToolResult:
    chapter = await context.store.get_chapter(params.id)
    if chapter is None:
        return fail(f"Chapter not found: {params.id}")
    paragraphs = split_paragraphs(chapter.content)
    total = len(paragraphs)
    start, end = clamp_range(params.start, params.end, total)
    return ok(
        f'Chapter "{chapter.title}" paragraphs {start}-{end} of {total}',
        {
            "id": chapter.id,
            "title": chapter.title,
            "content": "\n\n".join(paragraphs[start - 1 : end]),
            "start": start,
            "end": end,
            "totalParagraphs": total,
        },
    )


@define_tool(
    "search_chapter",
    "Search Chapter",
    "Search within a single chapter by keyword. Returns matching paragraph numbers with "
    "surrounding context. Use this instead of read_chapter when looking for a specific passage.",
    SearchChapterParams,
)
async def search_chapter(params: SearchChapterParams, context: ToolExecutionContext) -> ToolResult:
    chapter = await context.store.get_chapter(params.id)
    if chapter is None:
        return fail(f"Chapter not found: {params.id}")
    paragraphs = split_paragraphs(chapter.content)
    window = params.context_paragraphs if params.context_paragraphs is not None else 1
    needle = params.query.lower()

    matches: list[dict[str, int | str]] = []
    for i, paragraph in enumerate(paragraphs):
        if len(matches) >= MAX_SEARCH_MATCHES:
            break
        if needle not in paragraph.lower():
            continue
        lo = max(0, i - window)
        hi = min(len(paragraphs) - 1, i + window)
        matches.append({"paragraph": i + 1, "snippet": "\n\n".join(paragraphs[lo : hi + 1])})

    return ok(
        f'Found {len(matches)} matches for "{params.query}" in "{chapter.title}"',
        {
            "id": chapter.id,
            "title": chapter.title,
            "matches": matches,
            "totalMatches": len(matches),
        },
    )


@define_tool(
    "get_chapter_structure",
    "Get Chapter Structure",
    "Get the structural map of a chapter: scene boundaries with paragraph numbers and "
    "previews. Use this to understand chapter layout before reading specific sections.",
    ChapterIdParams,
)
async def get_chapter_structure(
    params: ChapterIdParams, context: ToolExecutionContext
) -> ToolResult:
    chapter = await context.store.get_chapter(params.id)
    if chapter is None:
        return fail(f"Chapter not found: {params.id}")
    paragraphs = split_paragraphs(chapter.content)
    scenes = scene_spans(paragraphs)
    return ok(
        f'Chapter "{chapter.title}": {len(scenes)} scene(s), {len(paragraphs)} paragraphs',
        {
            "id": chapter.id,
            "title": chapter.title,
            "totalParagraphs": len(paragraphs),
            "scenes": scenes,
        },
    )


TOOLS = [
    create_chapter,
    get_chapter,
    update_chapter,
    search_chapters,
    list_chapters,
    read_chapter,
    read_chapter_range,
    search_chapter,
    get_chapter_structure,
]
