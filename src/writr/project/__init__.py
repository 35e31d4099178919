"""Project data: entities, the data-access protocol and search."""

from .memory import InMemoryProjectStore
from .models import (
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
from .search import SearchPage, SearchResult, search_project
from .store import ProjectStore

__all__ = [
    "Chapter",
    "Character",
    "CharacterRelationship",
    "InMemoryProjectStore",
    "Location",
    "OutlineGridCell",
    "OutlineGridColumn",
    "OutlineGridRow",
    "Project",
    "ProjectStore",
    "SearchPage",
    "SearchResult",
    "StyleGuideEntry",
    "TimelineEvent",
    "WorldbuildingDoc",
    "search_project",
]
