"""Assemble the ordered message list for one model call.

Layout::

    system     preamble + <task>
    user       <novel> story bible            (cacheable)
    assistant  "Understood."
    user       <chapter> current document     (cacheable, optional)
    assistant  "Understood."                  (optional)
    ...        history
    user       new turn (+ <selected-text>, + images)
    assistant  prefill                        (optional)

The user/assistant context pairs form a stable prefix that caching providers
can reuse across calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
from typing import TYPE_CHECKING, Literal

from writr.prompts.serialize import (
    build_name_map,
    serialize_character,
    serialize_location,
    serialize_outline_grid,
    serialize_relationship,
    serialize_style_guide_entry,
    serialize_timeline_event,
    serialize_worldbuilding_tree,
)
from writr.types import ImagePart, Message, TextPart

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from writr.project.models import (
        Chapter,
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
    from writr.types import ContentPart

logger = logging.getLogger(__name__)

AiTask = Literal[
    "generate-prose",
    "review-text",
    "suggest-edits",
    "character-dialogue",
    "brainstorm",
    "summarize",
]

ACKNOWLEDGMENT = "Understood."
FALLBACK_TASK_INSTRUCTION = "Follow the user's instructions."

DEFAULT_SYSTEM_PROMPT = (
    "You are a creative writing assistant helping an author with their novel. "
    "Stay consistent with the established characters, setting, and style guide."
)

TOOL_MODE_INSTRUCTIONS = (
    "You can call tools to look up and edit the project. Only essential context "
    "is included below; use the list_*, get_*, search_* and read_* tools to fetch "
    "characters, locations, chapters and other details before relying on them. "
    "Tools that create or change data require the author's approval."
)

TASK_INSTRUCTIONS: dict[str, str] = {
    "generate-prose": (
        "Continue writing prose in the style and voice of this novel. "
        "Match the existing tone, tense, and POV. Output only the new prose, no commentary."
    ),
    "review-text": (
        "Review the provided text for: pacing, clarity, consistency with established "
        "characters/setting, grammar, and style adherence. Provide specific, actionable feedback."
    ),
    "suggest-edits": (
        "Suggest concrete line edits to improve the selected text. "
        "Format as a numbered list with the original text and your suggested replacement."
    ),
    "character-dialogue": (
        "Write dialogue for the specified characters that is consistent with their "
        "established voices and personalities. Include minimal action beats."
    ),
    "brainstorm": (
        "Brainstorm ideas related to the user's prompt. Offer 3-5 distinct options "
        "with brief descriptions for each."
    ),
    "summarize": (
        "Provide a concise summary of the provided text, capturing key plot points, "
        "character developments, and thematic elements."
    ),
}


@dataclass(frozen=True)
class AiContext:
    """Everything the prompt may draw on for one project."""

    project_title: str
    genre: str = ""
    characters: Sequence[Character] = ()
    locations: Sequence[Location] = ()
    style_guide: Sequence[StyleGuideEntry] = ()
    timeline_events: Sequence[TimelineEvent] = ()
    worldbuilding_docs: Sequence[WorldbuildingDoc] = ()
    relationships: Sequence[CharacterRelationship] = ()
    outline_columns: Sequence[OutlineGridColumn] = ()
    outline_rows: Sequence[OutlineGridRow] = ()
    outline_cells: Sequence[OutlineGridCell] = ()
    chapters: Sequence[Chapter] = ()
    current_chapter_title: str | None = None
    current_chapter_content: str | None = None
    selected_text: str | None = None


@dataclass(frozen=True)
class PromptOptions:
    """Caller overrides for message assembly."""

    #: Replaces the default preamble in the system message.
    system_prompt: str | None = None
    #: Per-task instruction overrides keyed by task id.
    task_prompts: Mapping[str, str] = field(default_factory=dict)
    #: Trailing assistant message that seeds the continuation.
    prefill: str | None = None
    images: Sequence[ImagePart] = ()
    tools_enabled: bool = False
    post_chat_instructions: str | None = None
    #: 0 targets the most recent genuine user message, 1 the one before, etc.
    post_chat_instructions_depth: int = 0


def task_instruction(task: str, options: PromptOptions | None = None) -> str:
    """Return the instruction for *task*; unknown ids get a generic fallback."""
    if options is not None and task in options.task_prompts:
        return options.task_prompts[task]
    return TASK_INSTRUCTIONS.get(task, FALLBACK_TASK_INSTRUCTION)


def _section(tag: str, fragments: Sequence[str]) -> str | None:
    body = [f for f in fragments if f]
    if not body:
        return None
    return "\n".join([f"<{tag}>", *body, f"</{tag}>"])


def build_story_bible(context: AiContext, *, minimal: bool = False) -> str:
    """Serialize the context bundle as a ``<novel>`` block.

    *minimal* keeps only project metadata and the style guide.
    """
    genre_attr = f' genre="{context.genre}"' if context.genre else ""
    sections: list[str | None] = []

    if minimal:
        sections.append(
            _section("style-guide", [serialize_style_guide_entry(s) for s in context.style_guide])
        )
    else:
        char_names = build_name_map(context.characters, lambda c: c.name)
        chapter_names = build_name_map(context.chapters, lambda c: c.title)
        sections.extend(
            [
                _section("characters", [serialize_character(c) for c in context.characters]),
                _section(
                    "locations",
                    [serialize_location(loc, char_names) for loc in context.locations],
                ),
                _section(
                    "style-guide",
                    [serialize_style_guide_entry(s) for s in context.style_guide],
                ),
                _section(
                    "timeline",
                    [serialize_timeline_event(e, char_names) for e in context.timeline_events],
                ),
                _section(
                    "worldbuilding",
                    [serialize_worldbuilding_tree(context.worldbuilding_docs)],
                ),
                _section(
                    "outline",
                    [
                        serialize_outline_grid(
                            context.outline_columns,
                            context.outline_rows,
                            context.outline_cells,
                            chapter_names,
                        )
                    ]
                    if context.outline_columns
                    else [],
                ),
                _section(
                    "relationships",
                    [serialize_relationship(r, char_names) for r in context.relationships],
                ),
            ]
        )

    lines = [f'<novel title="{context.project_title}"{genre_attr}>']
    lines.extend(s for s in sections if s)
    lines.append("</novel>")
    return "\n".join(lines)


def _with_cache_hint(msg: Message) -> Message:
    """Mark the final text part of *msg* cacheable."""
    if isinstance(msg.content, str):
        if not msg.content:
            return msg
        return replace(msg, content=[TextPart(msg.content, cache_hint="ephemeral")])
    parts = list(msg.content)
    for i in range(len(parts) - 1, -1, -1):
        part = parts[i]
        if isinstance(part, TextPart):
            parts[i] = replace(part, cache_hint="ephemeral")
            return replace(msg, content=parts)
    return msg


def _append_instructions(msg: Message, instructions: str) -> Message:
    if isinstance(msg.content, str):
        return replace(msg, content=f"{msg.content}\n\n{instructions}")
    parts: list[ContentPart] = list(msg.content)
    for i in range(len(parts) - 1, -1, -1):
        part = parts[i]
        if isinstance(part, TextPart):
            parts[i] = replace(part, text=f"{part.text}\n\n{instructions}")
            return replace(msg, content=parts)
    parts.append(TextPart(instructions))
    return replace(msg, content=parts)


def build_messages(
    task: str,
    user_prompt: str,
    context: AiContext,
    history: Sequence[Message] = (),
    options: PromptOptions | None = None,
) -> list[Message]:
    """Build the full message list for one call."""
    opts = options or PromptOptions()
    messages: list[Message] = []
    synthetic: set[int] = set()

    preamble = opts.system_prompt or DEFAULT_SYSTEM_PROMPT
    if opts.tools_enabled:
        preamble = f"{preamble}\n\n{TOOL_MODE_INSTRUCTIONS}"
    messages.append(
        Message(
            role="system",
            content=f"{preamble}\n\n<task>\n{task_instruction(task, opts)}\n</task>",
        )
    )

    bible = build_story_bible(context, minimal=opts.tools_enabled)
    synthetic.add(len(messages))
    messages.append(Message(role="user", content=[TextPart(bible, cache_hint="ephemeral")]))
    messages.append(Message(role="assistant", content=ACKNOWLEDGMENT))

    if context.current_chapter_content:
        title = context.current_chapter_title or "Untitled"
        chapter_block = f'<chapter title="{title}">\n{context.current_chapter_content}\n</chapter>'
        synthetic.add(len(messages))
        messages.append(
            Message(role="user", content=[TextPart(chapter_block, cache_hint="ephemeral")])
        )
        messages.append(Message(role="assistant", content=ACKNOWLEDGMENT))

    history_list = list(history)
    if opts.tools_enabled and history_list:
        history_list[-1] = _with_cache_hint(history_list[-1])
    messages.extend(history_list)

    text = user_prompt
    if context.selected_text:
        text = f"<selected-text>\n{context.selected_text}\n</selected-text>\n\n{user_prompt}"
    if opts.images:
        messages.append(Message(role="user", content=[TextPart(text), *opts.images]))
    else:
        messages.append(Message(role="user", content=text))

    if opts.post_chat_instructions:
        genuine = [
            i for i, m in enumerate(messages) if m.role == "user" and i not in synthetic
        ]
        target = genuine[max(0, len(genuine) - 1 - opts.post_chat_instructions_depth)]
        messages[target] = _append_instructions(messages[target], opts.post_chat_instructions)

    if opts.prefill:
        messages.append(Message(role="assistant", content=opts.prefill))

    logger.debug(
        "Built %d messages for task=%s (tools=%s, history=%d)",
        len(messages),
        task,
        opts.tools_enabled,
        len(history_list),
    )
    return messages
