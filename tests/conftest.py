"""Pytest configuration and fixtures.

Provides environment isolation, logging configuration, marker handling,
automatic API test skipping and a seeded in-memory project store.
"""

from __future__ import annotations

from contextlib import suppress
import logging
import os

import pytest

from writr.project import (
    Chapter,
    Character,
    CharacterRelationship,
    InMemoryProjectStore,
    Location,
    OutlineGridCell,
    OutlineGridColumn,
    OutlineGridRow,
    Project,
    StyleGuideEntry,
    TimelineEvent,
    WorldbuildingDoc,
)
from writr.tools import ToolExecutionContext

PROVIDER_ENV_PREFIXES = (
    "OPENROUTER_",
    "OPENAI_",
    "XAI_",
    "ZAI_",
    "ANTHROPIC_",
    "GEMINI_",
    "GOOGLE_VERTEX_",
)

# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_provider_env(request, monkeypatch):
    """Ensure a clean provider environment for each test.

    Opt-out: @pytest.mark.allow_env_pollution or @pytest.mark.api
    """
    if request.node.get_closest_marker("allow_env_pollution") or (
        "api" in request.node.keywords
    ):
        return

    for key in list(os.environ.keys()):
        if key.startswith(PROVIDER_ENV_PREFIXES):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Suppress noisy third-party loggers."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# =============================================================================
# Pytest Hooks
# =============================================================================

API_TESTS_REASON = "API tests require ENABLE_API_TESTS=1"


def pytest_collection_modifyitems(items):
    """Automatically skip API tests when not explicitly enabled."""
    if os.getenv("ENABLE_API_TESTS"):
        return
    skip_api = pytest.mark.skip(reason=API_TESTS_REASON)
    for item in items:
        if "api" in item.keywords:
            item.add_marker(skip_api)


# =============================================================================
# Project Data
# =============================================================================

PROJECT_ID = "proj-1"

CHAPTER_ONE_TEXT = "\n\n".join(
    [
        "Mara woke before the bells.",
        "The harbor was silent under the fog.",
        "***",
        "At noon the lighthouse keeper arrived with news.",
        "He spoke of a ship with black sails.",
    ]
)


@pytest.fixture
def store() -> InMemoryProjectStore:
    """A small but complete project: every entity table has at least one row."""
    s = InMemoryProjectStore()
    s.add_project(Project(id=PROJECT_ID, title="The Salt Road", genre="Fantasy"))

    s.add(
        Character(
            id="char-mara",
            project_id=PROJECT_ID,
            name="Mara",
            role="protagonist",
            pronouns="she/her",
            description="A harbor pilot with a scar across one palm.",
            personality="Stubborn, dry humor",
            dialogue_style="Clipped sentences",
        )
    )
    s.add(
        Character(
            id="char-tobin",
            project_id=PROJECT_ID,
            name="Tobin",
            role="supporting",
            description="The lighthouse keeper.",
        )
    )
    s.add(
        CharacterRelationship(
            id="rel-1",
            project_id=PROJECT_ID,
            source_character_id="char-mara",
            target_character_id="char-tobin",
            type="sibling",
        )
    )
    s.add(
        Location(
            id="loc-harbor",
            project_id=PROJECT_ID,
            name="Greyhaven Harbor",
            description="A fog-bound harbor town.",
            linked_character_ids=["char-mara"],
        )
    )
    s.add(
        TimelineEvent(
            id="evt-1",
            project_id=PROJECT_ID,
            title="The black ship arrives",
            date="Year 12, Spring",
        )
    )
    s.add(
        StyleGuideEntry(
            id="style-1",
            project_id=PROJECT_ID,
            category="tense",
            title="Past tense",
            content="Narrate in close third person, past tense.",
        )
    )
    s.add(
        WorldbuildingDoc(
            id="wb-1",
            project_id=PROJECT_ID,
            title="Tides",
            content="The tides follow two moons.",
            tags=["nature"],
        )
    )
    s.add(
        Chapter(
            id="ch-1",
            project_id=PROJECT_ID,
            title="Fog",
            order=0,
            content=CHAPTER_ONE_TEXT,
            synopsis="Mara hears of the ship.",
        )
    )
    s.add(Chapter(id="ch-2", project_id=PROJECT_ID, title="Sails", order=1, content=""))
    s.add(OutlineGridColumn(id="col-1", project_id=PROJECT_ID, title="Plot", order=0))
    s.add(
        OutlineGridRow(
            id="row-1", project_id=PROJECT_ID, label="Act I", order=0, linked_chapter_id="ch-1"
        )
    )
    s.add(
        OutlineGridCell(
            id="cell-1",
            project_id=PROJECT_ID,
            row_id="row-1",
            column_id="col-1",
            content="The black ship is sighted.",
        )
    )
    return s


@pytest.fixture
def tool_context(store: InMemoryProjectStore) -> ToolExecutionContext:
    return ToolExecutionContext(project_id=PROJECT_ID, store=store)
