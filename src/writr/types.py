"""Provider-agnostic message, request, and response shapes.

Every adapter consumes `CompletionParams` and produces either an `AiResponse`
(blocking calls) or a sequence of `AiStreamChunk` values (streaming calls).
Nothing in this module talks to a provider.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

Role = Literal["system", "user", "assistant", "tool"]
CacheHint = Literal["ephemeral"]
ReasoningEffort = Literal["none", "minimal", "low", "medium", "high", "xhigh"]
FinishReason = Literal["stop", "length", "content_filter", "tool_use", "unknown"]

ROLES: frozenset[str] = frozenset({"system", "user", "assistant", "tool"})
REASONING_EFFORTS: tuple[str, ...] = (
    "none",
    "minimal",
    "low",
    "medium",
    "high",
    "xhigh",
)
FINISH_REASONS: frozenset[str] = frozenset(
    {"stop", "length", "content_filter", "tool_use", "unknown"}
)


# =============================================================================
# Content
# =============================================================================


@dataclass(frozen=True)
class TextPart:
    """A run of text, optionally marking a cacheable prefix boundary."""

    text: str
    cache_hint: CacheHint | None = None
    type: Literal["text"] = field(default="text", init=False)


@dataclass(frozen=True)
class ImagePart:
    """An image reference: a ``data:`` URL or a remote URL."""

    url: str
    cache_hint: CacheHint | None = None
    type: Literal["image"] = field(default="image", init=False)


ContentPart = TextPart | ImagePart


@dataclass(frozen=True)
class ToolCall:
    """A tool call requested by the model."""

    id: str
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Message:
    """One conversational turn.

    ``content`` is either plain text or an ordered list of parts. A ``tool``
    message answers an earlier assistant tool call named by ``tool_call_id``.
    """

    role: Role
    content: str | list[ContentPart] = ""
    tool_calls: list[ToolCall] | None = None
    tool_call_id: str | None = None

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"Unknown message role: {self.role!r}")
        if self.role == "tool" and not self.tool_call_id:
            raise ValueError("tool messages must carry tool_call_id")
        if self.tool_calls and self.role != "assistant":
            raise ValueError("only assistant messages may carry tool_calls")

    @property
    def parts(self) -> list[ContentPart]:
        """Content as a list of parts (plain text becomes one TextPart)."""
        if isinstance(self.content, str):
            return [TextPart(self.content)] if self.content else []
        return list(self.content)

    @property
    def text(self) -> str:
        """Concatenated text content, ignoring images."""
        if isinstance(self.content, str):
            return self.content
        return "".join(p.text for p in self.content if isinstance(p, TextPart))

    @property
    def has_images(self) -> bool:
        return any(isinstance(p, ImagePart) for p in self.parts)

    @property
    def has_cache_hints(self) -> bool:
        return any(p.cache_hint for p in self.parts)


# =============================================================================
# Requests
# =============================================================================


@dataclass(frozen=True)
class ToolSpec:
    """Model-facing description of a callable tool."""

    id: str
    name: str
    description: str
    parameters: dict[str, Any]


@dataclass(frozen=True)
class CompletionParams:
    """One model call: the full message list plus generation settings."""

    model: str
    messages: list[Message]
    temperature: float = 0.7
    max_tokens: int = 4096
    #: ``None`` and ``"none"`` both mean "no reasoning configuration".
    reasoning_effort: ReasoningEffort | None = None
    tools: list[ToolSpec] | None = None

    def __post_init__(self) -> None:
        if not self.model:
            raise ValueError("CompletionParams.model must be non-empty")
        if self.max_tokens <= 0:
            raise ValueError("CompletionParams.max_tokens must be > 0")
        if (
            self.reasoning_effort is not None
            and self.reasoning_effort not in REASONING_EFFORTS
        ):
            allowed = ", ".join(REASONING_EFFORTS)
            raise ValueError(
                f"Unsupported reasoning effort {self.reasoning_effort!r}; use one of: {allowed}"
            )

        seen_call_ids: set[str] = set()
        for msg in self.messages:
            if msg.role == "assistant" and msg.tool_calls:
                seen_call_ids.update(tc.id for tc in msg.tool_calls)
            elif msg.role == "tool" and msg.tool_call_id not in seen_call_ids:
                raise ValueError(
                    f"tool message references unknown tool call {msg.tool_call_id!r}"
                )

    @property
    def thinking_enabled(self) -> bool:
        """Whether a reasoning directive should be sent to the provider."""
        return self.reasoning_effort not in (None, "none")


# =============================================================================
# Responses
# =============================================================================


@dataclass(frozen=True)
class Usage:
    """Token usage triple."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass(frozen=True)
class AiResponse:
    """Normalized result of a blocking completion call."""

    content: str
    model: str
    finish_reason: FinishReason = "stop"
    reasoning: str | None = None
    usage: Usage | None = None
    tool_calls: list[ToolCall] | None = None


@dataclass(frozen=True)
class ReasoningChunk:
    text: str
    type: Literal["reasoning"] = field(default="reasoning", init=False)


@dataclass(frozen=True)
class ContentChunk:
    text: str
    type: Literal["content"] = field(default="content", init=False)


@dataclass(frozen=True)
class ToolUseChunk:
    """A fully reassembled tool call; never carries partial arguments."""

    id: str
    name: str
    input: dict[str, Any] = field(default_factory=dict)
    type: Literal["tool_use"] = field(default="tool_use", init=False)


@dataclass(frozen=True)
class StopChunk:
    """Terminates a stream. Exactly one per stream, always last."""

    finish_reason: FinishReason = "stop"
    type: Literal["stop"] = field(default="stop", init=False)


AiStreamChunk = ReasoningChunk | ContentChunk | ToolUseChunk | StopChunk
