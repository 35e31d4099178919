"""Prompt assembly: entity serializers and the message builder."""

from .builder import (
    ACKNOWLEDGMENT,
    DEFAULT_SYSTEM_PROMPT,
    FALLBACK_TASK_INSTRUCTION,
    TASK_INSTRUCTIONS,
    TOOL_MODE_INSTRUCTIONS,
    AiContext,
    AiTask,
    PromptOptions,
    build_messages,
    build_story_bible,
    task_instruction,
)
from .serialize import (
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

__all__ = [
    "ACKNOWLEDGMENT",
    "DEFAULT_SYSTEM_PROMPT",
    "FALLBACK_TASK_INSTRUCTION",
    "TASK_INSTRUCTIONS",
    "TOOL_MODE_INSTRUCTIONS",
    "AiContext",
    "AiTask",
    "PromptOptions",
    "build_messages",
    "build_name_map",
    "build_story_bible",
    "serialize_character",
    "serialize_location",
    "serialize_outline_grid",
    "serialize_relationship",
    "serialize_style_guide_entry",
    "serialize_timeline_event",
    "serialize_worldbuilding_tree",
    "task_instruction",
    "truncate",
]
