"""Message and request invariants."""

from __future__ import annotations

import pytest

from writr.types import (
    CompletionParams,
    ImagePart,
    Message,
    TextPart,
    ToolCall,
)

pytestmark = pytest.mark.unit


def test_plain_text_message_exposes_one_part() -> None:
    msg = Message(role="user", content="hi")
    assert msg.parts == [TextPart("hi")]
    assert msg.text == "hi"
    assert not msg.has_images
    assert not msg.has_cache_hints


def test_multipart_text_ignores_images() -> None:
    msg = Message(
        role="user",
        content=[TextPart("look "), ImagePart("https://example.com/a.png"), TextPart("here")],
    )
    assert msg.text == "look here"
    assert msg.has_images


def test_cache_hint_detection() -> None:
    msg = Message(role="user", content=[TextPart("ctx", cache_hint="ephemeral")])
    assert msg.has_cache_hints


def test_unknown_role_rejected() -> None:
    with pytest.raises(ValueError, match="role"):
        Message(role="narrator", content="x")  # type: ignore[arg-type]


def test_tool_message_requires_call_id() -> None:
    with pytest.raises(ValueError, match="tool_call_id"):
        Message(role="tool", content="{}")


def test_only_assistant_messages_carry_tool_calls() -> None:
    with pytest.raises(ValueError, match="assistant"):
        Message(role="user", content="x", tool_calls=[ToolCall(id="c1", name="list_characters")])


def test_tool_message_must_answer_an_earlier_call() -> None:
    with pytest.raises(ValueError, match="unknown tool call"):
        CompletionParams(
            model="m",
            messages=[
                Message(role="user", content="go"),
                Message(role="tool", content="{}", tool_call_id="missing"),
            ],
        )


def test_tool_message_answering_earlier_call_is_valid() -> None:
    params = CompletionParams(
        model="m",
        messages=[
            Message(role="user", content="go"),
            Message(
                role="assistant",
                tool_calls=[ToolCall(id="c1", name="list_characters")],
            ),
            Message(role="tool", content="{}", tool_call_id="c1"),
        ],
    )
    assert len(params.messages) == 3


@pytest.mark.parametrize(
    "kwargs",
    [{"model": ""}, {"model": "m", "max_tokens": 0}, {"model": "m", "reasoning_effort": "huge"}],
)
def test_completion_params_validation(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        CompletionParams(messages=[Message(role="user", content="x")], **kwargs)


@pytest.mark.parametrize(
    ("effort", "enabled"),
    [(None, False), ("none", False), ("minimal", True), ("xhigh", True)],
)
def test_thinking_enabled(effort: str | None, enabled: bool) -> None:
    params = CompletionParams(
        model="m", messages=[Message(role="user", content="x")], reasoning_effort=effort
    )
    assert params.thinking_enabled is enabled
