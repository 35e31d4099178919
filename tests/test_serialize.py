"""Entity serializers for the story bible."""

from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st
import pytest

from writr.project import (
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
from writr.prompts.serialize import (
    OUTLINE_CELL_TRUNCATE_LENGTH,
    WORLDBUILDING_TRUNCATE_LENGTH,
    build_name_map,
    serialize_character,
    serialize_location,
    serialize_outline_grid,
    serialize_relationship,
    serialize_style_guide_entry,
    serialize_timeline_event,
    serialize_worldbuilding_tree,
    truncate,
)

pytestmark = pytest.mark.unit

P = "proj-1"


# =============================================================================
# truncate
# =============================================================================


@given(st.text(max_size=300), st.integers(min_value=0, max_value=200))
def test_truncate_keeps_prefix_and_marks_cuts(text: str, limit: int) -> None:
    out = truncate(text, limit)
    if len(text) <= limit:
        assert out == text
    else:
        assert out == text[:limit] + "..."


# =============================================================================
# Entities
# =============================================================================


def test_character_emits_only_filled_fields() -> None:
    c = Character(
        project_id=P,
        name="Mara",
        role="protagonist",
        pronouns="she/her",
        aliases=["The Pilot", "Mar"],
        personality="Stubborn",
        internal_conflict="Duty against freedom",
        dialogue_style="Clipped",
    )
    assert serialize_character(c) == "\n".join(
        [
            '<character name="Mara" role="protagonist" pronouns="she/her">',
            "<aliases>The Pilot, Mar</aliases>",
            "<personality>Stubborn</personality>",
            "<internal-conflict>Duty against freedom</internal-conflict>",
            "<dialogue-style>Clipped</dialogue-style>",
            "</character>",
        ]
    )


def test_character_without_pronouns() -> None:
    c = Character(project_id=P, name="Tobin")
    assert serialize_character(c) == '<character name="Tobin" role="supporting">\n</character>'


def test_location_resolves_linked_character_names_and_skips_unknown() -> None:
    loc = Location(
        project_id=P,
        name="Harbor",
        notes="Smells of tar",
        linked_character_ids=["c1", "gone", "c2"],
    )
    out = serialize_location(loc, {"c1": "Mara", "c2": "Tobin"})
    assert out == "\n".join(
        [
            '<location name="Harbor">',
            "<notes>Smells of tar</notes>",
            "<characters-here>Mara, Tobin</characters-here>",
            "</location>",
        ]
    )


def test_timeline_event_with_date_and_characters() -> None:
    event = TimelineEvent(
        project_id=P,
        title="Arrival",
        date="Spring",
        description="A ship.",
        linked_character_ids=["c1"],
    )
    assert serialize_timeline_event(event, {"c1": "Mara"}) == "\n".join(
        [
            '<event title="Arrival" date="Spring">',
            "<description>A ship.</description>",
            "<characters-involved>Mara</characters-involved>",
            "</event>",
        ]
    )


def test_timeline_event_without_date_has_no_date_attribute() -> None:
    event = TimelineEvent(project_id=P, title="Later")
    assert serialize_timeline_event(event, {}) == '<event title="Later">\n</event>'


def test_style_rule() -> None:
    entry = StyleGuideEntry(project_id=P, title="Tense", content="Past tense.")
    assert serialize_style_guide_entry(entry) == '<rule title="Tense">\nPast tense.\n</rule>'


def test_relationship_uses_custom_label_only_for_custom_type() -> None:
    names = {"a": "Mara", "b": "Tobin"}
    custom = CharacterRelationship(
        project_id=P, source_character_id="a", target_character_id="b", type="custom", custom_label="rival"
    )
    sibling = CharacterRelationship(
        project_id=P, source_character_id="a", target_character_id="b", type="sibling", custom_label="ignored"
    )
    assert serialize_relationship(custom, names) == '<relationship source="Mara" target="Tobin" type="rival" />'
    assert serialize_relationship(sibling, names) == '<relationship source="Mara" target="Tobin" type="sibling" />'


def test_relationship_with_missing_endpoint_is_empty() -> None:
    rel = CharacterRelationship(project_id=P, source_character_id="a", target_character_id="zz", type="parent")
    assert serialize_relationship(rel, {"a": "Mara"}) == ""


def test_build_name_map() -> None:
    chars = [Character(id="a", project_id=P, name="Mara"), Character(id="b", project_id=P, name="Tobin")]
    assert build_name_map(chars, lambda c: c.name) == {"a": "Mara", "b": "Tobin"}


# =============================================================================
# Trees and grids
# =============================================================================


def test_worldbuilding_tree_nests_children_and_truncates() -> None:
    long_text = "x" * (WORLDBUILDING_TRUNCATE_LENGTH + 10)
    docs = [
        WorldbuildingDoc(id="root", project_id=P, title="Magic", tags=["lore", "rules"]),
        WorldbuildingDoc(id="kid", project_id=P, title="Runes", content=long_text, parent_doc_id="root"),
        WorldbuildingDoc(id="orphan", project_id=P, title="Lost", parent_doc_id="missing"),
    ]
    out = serialize_worldbuilding_tree(docs)

    assert out.startswith('<doc title="Magic" tags="lore, rules">\n<doc title="Runes">\n')
    assert "x" * WORLDBUILDING_TRUNCATE_LENGTH + "..." in out
    assert out.endswith("</doc>\n</doc>")
    assert "Lost" not in out


def test_outline_grid_orders_rows_and_columns_and_skips_empty_cells() -> None:
    columns = [
        OutlineGridColumn(id="c2", project_id=P, title="Theme", order=1),
        OutlineGridColumn(id="c1", project_id=P, title="Plot", order=0),
    ]
    rows = [
        OutlineGridRow(id="r2", project_id=P, label="", order=1),
        OutlineGridRow(id="r1", project_id=P, label="Act I", order=0, linked_chapter_id="ch-1"),
    ]
    cells = [
        OutlineGridCell(project_id=P, row_id="r1", column_id="c2", content="Loss"),
        OutlineGridCell(project_id=P, row_id="r1", column_id="c1", content="y" * (OUTLINE_CELL_TRUNCATE_LENGTH + 1)),
        OutlineGridCell(project_id=P, row_id="r2", column_id="c1", content=""),
    ]
    out = serialize_outline_grid(columns, rows, cells, {"ch-1": "Fog"})

    assert out == "\n".join(
        [
            '<row label="Act I" chapter="Fog">',
            f'<cell column="Plot">{"y" * OUTLINE_CELL_TRUNCATE_LENGTH}...</cell>',
            '<cell column="Theme">Loss</cell>',
            "</row>",
            '<row label="Row 2">',
            "</row>",
        ]
    )


@pytest.mark.parametrize(
    ("length", "truncated"),
    [(WORLDBUILDING_TRUNCATE_LENGTH, False), (WORLDBUILDING_TRUNCATE_LENGTH + 1, True)],
)
def test_worldbuilding_ceiling_is_inclusive(length: int, truncated: bool) -> None:
    doc = WorldbuildingDoc(project_id=P, title="Lore", content="z" * length)
    body = serialize_worldbuilding_tree([doc]).splitlines()[1]
    assert body.endswith("...") is truncated
    assert len(body) == WORLDBUILDING_TRUNCATE_LENGTH + (3 if truncated else 0)
