"""Render project entities as compact tagged text for model context."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping, Sequence

    from writr.project.models import (
        Character,
        CharacterRelationship,
        Location,
        OutlineGridCell,
        OutlineGridColumn,
        OutlineGridRow,
        StyleGuideEntry,
        TimelineEvent,
        WorldbuildingDoc,
    )

T = TypeVar("T")

WORLDBUILDING_TRUNCATE_LENGTH = 2048
OUTLINE_CELL_TRUNCATE_LENGTH = 1024


def truncate(text: str, limit: int) -> str:
    """Cut *text* to *limit* characters, marking the cut with ``...``."""
    return f"{text[:limit]}..." if len(text) > limit else text


def build_name_map(items: Iterable[T], name_of: Callable[[T], str]) -> dict[str, str]:
    """Map each item's ``id`` to its display name."""
    return {item.id: name_of(item) for item in items}  # type: ignore[attr-defined]


def _resolve_names(ids: Sequence[str], name_map: Mapping[str, str]) -> list[str]:
    return [name_map[i] for i in ids if i in name_map]


def serialize_character(c: Character) -> str:
    attrs = f' role="{c.role}"'
    if c.pronouns:
        attrs += f' pronouns="{c.pronouns}"'
    lines = [f'<character name="{c.name}"{attrs}>']

    if c.aliases:
        lines.append(f"<aliases>{', '.join(c.aliases)}</aliases>")
    for tag, value in (
        ("description", c.description),
        ("personality", c.personality),
        ("motivations", c.motivations),
        ("strengths", c.strengths),
        ("weaknesses", c.weaknesses),
        ("internal-conflict", c.internal_conflict),
        ("character-arcs", c.character_arcs),
        ("dialogue-style", c.dialogue_style),
        ("backstory", c.backstory),
    ):
        if value:
            lines.append(f"<{tag}>{value}</{tag}>")

    lines.append("</character>")
    return "\n".join(lines)


def serialize_location(loc: Location, character_names: Mapping[str, str]) -> str:
    lines = [f'<location name="{loc.name}">']
    if loc.description:
        lines.append(f"<description>{loc.description}</description>")
    if loc.notes:
        lines.append(f"<notes>{loc.notes}</notes>")
    names = _resolve_names(loc.linked_character_ids, character_names)
    if names:
        lines.append(f"<characters-here>{', '.join(names)}</characters-here>")
    lines.append("</location>")
    return "\n".join(lines)


def serialize_timeline_event(event: TimelineEvent, character_names: Mapping[str, str]) -> str:
    date_attr = f' date="{event.date}"' if event.date else ""
    lines = [f'<event title="{event.title}"{date_attr}>']
    if event.description:
        lines.append(f"<description>{event.description}</description>")
    names = _resolve_names(event.linked_character_ids, character_names)
    if names:
        lines.append(f"<characters-involved>{', '.join(names)}</characters-involved>")
    lines.append("</event>")
    return "\n".join(lines)


def serialize_style_guide_entry(entry: StyleGuideEntry) -> str:
    return f'<rule title="{entry.title}">\n{entry.content}\n</rule>'


def serialize_relationship(
    rel: CharacterRelationship, character_names: Mapping[str, str]
) -> str:
    """Render one relationship; empty when either endpoint is unknown."""
    source = character_names.get(rel.source_character_id)
    target = character_names.get(rel.target_character_id)
    if not source or not target:
        return ""
    label = rel.custom_label if rel.type == "custom" and rel.custom_label else rel.type
    return f'<relationship source="{source}" target="{target}" type="{label}" />'


def serialize_worldbuilding_tree(docs: Sequence[WorldbuildingDoc]) -> str:
    """Render docs as a nested tree rooted at docs without a parent.

    Content longer than 2,048 characters is truncated.
    """
    children_of: dict[str | None, list[WorldbuildingDoc]] = defaultdict(list)
    for doc in docs:
        children_of[doc.parent_doc_id].append(doc)

    def render(doc: WorldbuildingDoc) -> str:
        tags_attr = f' tags="{", ".join(doc.tags)}"' if doc.tags else ""
        lines = [f'<doc title="{doc.title}"{tags_attr}>']
        if doc.content:
            lines.append(truncate(doc.content, WORLDBUILDING_TRUNCATE_LENGTH))
        lines.extend(render(child) for child in children_of.get(doc.id, ()))
        lines.append("</doc>")
        return "\n".join(lines)

    return "\n".join(render(root) for root in children_of.get(None, ()))


def serialize_outline_grid(
    columns: Sequence[OutlineGridColumn],
    rows: Sequence[OutlineGridRow],
    cells: Sequence[OutlineGridCell],
    chapter_names: Mapping[str, str],
) -> str:
    """Render the outline grid row by row, one ``<cell>`` per filled column."""
    sorted_columns = sorted(columns, key=lambda c: c.order)
    cell_at = {(cell.row_id, cell.column_id): cell for cell in cells}

    lines: list[str] = []
    for row in sorted(rows, key=lambda r: r.order):
        label = row.label or f"Row {row.order + 1}"
        chapter = chapter_names.get(row.linked_chapter_id or "")
        chapter_attr = f' chapter="{chapter}"' if chapter else ""
        lines.append(f'<row label="{label}"{chapter_attr}>')
        for column in sorted_columns:
            cell = cell_at.get((row.id, column.id))
            if cell is None or not cell.content:
                continue
            content = truncate(cell.content, OUTLINE_CELL_TRUNCATE_LENGTH)
            lines.append(f'<cell column="{column.title}">{content}</cell>')
        lines.append("</row>")
    return "\n".join(lines)
