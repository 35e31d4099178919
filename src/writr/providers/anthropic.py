"""Anthropic Messages API adapter."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from writr.errors import APIError
from writr.providers._errors import wrap_provider_error
from writr.providers._utils import (
    parse_base64_image_data_url,
    parse_tool_arguments,
    terminate_stream,
)
from writr.providers.signal import call_with_signal, iterate_with_signal
from writr.types import (
    AiResponse,
    ContentChunk,
    ImagePart,
    ReasoningChunk,
    StopChunk,
    TextPart,
    ToolCall,
    ToolUseChunk,
    Usage,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from writr.providers.signal import AbortSignal
    from writr.types import (
        AiStreamChunk,
        CompletionParams,
        ContentPart,
        FinishReason,
        Message,
    )

logger = logging.getLogger(__name__)

PROVIDER = "anthropic"

_STOP_REASONS: dict[str, FinishReason] = {
    "end_turn": "stop",
    "stop_sequence": "stop",
    "max_tokens": "length",
    "tool_use": "tool_use",
}
THINKING_BUDGETS: dict[str, int] = {
    "minimal": 1024,
    "low": 4096,
    "medium": 10240,
    "high": 20480,
    "xhigh": 32768,
}
_DEFAULT_THINKING_BUDGET = 10240
ADAPTIVE_EFFORTS: dict[str, str] = {
    "xhigh": "max",
    "high": "high",
    "medium": "medium",
    "low": "low",
    "minimal": "low",
}
_ADAPTIVE_THINKING_MODEL_PREFIXES = ("claude-opus-4-6", "claude-sonnet-4-6")
_MAX_EFFORT_MODEL_PREFIXES = ("claude-opus-4-6",)


def normalize_stop_reason(stop_reason: str | None) -> FinishReason:
    """Map an Anthropic stop_reason onto the closed set."""
    if not stop_reason:
        return "stop"
    return _STOP_REASONS.get(stop_reason, "unknown")


def _supports_adaptive_thinking(model: str) -> bool:
    return model.startswith(_ADAPTIVE_THINKING_MODEL_PREFIXES)


def _text_block(part: TextPart) -> dict[str, Any]:
    block: dict[str, Any] = {"type": "text", "text": part.text}
    if part.cache_hint:
        block["cache_control"] = {"type": part.cache_hint}
    return block


def _image_block(part: ImagePart) -> dict[str, Any]:
    parsed = parse_base64_image_data_url(part.url)
    if parsed is not None:
        media_type, data = parsed
        return {
            "type": "image",
            "source": {"type": "base64", "media_type": media_type, "data": data},
        }
    return {"type": "image", "source": {"type": "url", "url": part.url}}


def _content_blocks(parts: list[ContentPart]) -> list[dict[str, Any]]:
    return [
        _image_block(p) if isinstance(p, ImagePart) else _text_block(p)
        for p in parts
    ]


def _append_message(messages: list[dict[str, Any]], msg: dict[str, Any]) -> None:
    """Append *msg*, merging into the previous message when roles match.

    Anthropic requires strict user/assistant alternation, so a tool result
    followed by a fresh user turn becomes one user message.
    """
    if messages and messages[-1]["role"] == msg["role"]:
        prev = messages[-1]
        prev_content = prev["content"]
        new_content = msg["content"]
        if isinstance(prev_content, str):
            prev_content = [{"type": "text", "text": prev_content}]
        if isinstance(new_content, str):
            new_content = [{"type": "text", "text": new_content}]
        prev["content"] = prev_content + new_content
    else:
        messages.append(msg)


def build_messages(
    messages: list[Message],
) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """Split *messages* into ``(system_blocks, anthropic_messages)``."""
    system: list[dict[str, Any]] = []
    converted: list[dict[str, Any]] = []

    for msg in messages:
        if msg.role == "system":
            system.extend(
                _text_block(p) for p in msg.parts if isinstance(p, TextPart)
            )
        elif msg.role == "tool":
            _append_message(
                converted,
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "tool_result",
                            "tool_use_id": msg.tool_call_id or "",
                            "content": msg.text,
                        }
                    ],
                },
            )
        elif msg.role == "assistant" and msg.tool_calls:
            blocks: list[dict[str, Any]] = []
            if msg.text:
                blocks.append({"type": "text", "text": msg.text})
            blocks.extend(
                {"type": "tool_use", "id": tc.id, "name": tc.name, "input": tc.arguments}
                for tc in msg.tool_calls
            )
            _append_message(converted, {"role": "assistant", "content": blocks})
        elif isinstance(msg.content, str):
            _append_message(converted, {"role": msg.role, "content": msg.content})
        elif msg.has_images or msg.has_cache_hints:
            _append_message(
                converted, {"role": msg.role, "content": _content_blocks(msg.content)}
            )
        else:
            _append_message(converted, {"role": msg.role, "content": msg.text})

    return system, converted


def build_thinking_kwargs(params: CompletionParams) -> dict[str, Any]:
    """Return the thinking directive, or the temperature when thinking is off."""
    if not params.thinking_enabled:
        return {"temperature": params.temperature}

    effort = params.reasoning_effort or ""
    if _supports_adaptive_thinking(params.model):
        label = ADAPTIVE_EFFORTS.get(effort, "high")
        if label == "max" and not params.model.startswith(_MAX_EFFORT_MODEL_PREFIXES):
            label = "high"
        return {"thinking": {"type": "adaptive"}, "output_config": {"effort": label}}

    # budget_tokens must stay below max_tokens.
    budget = min(
        THINKING_BUDGETS.get(effort, _DEFAULT_THINKING_BUDGET), params.max_tokens - 1
    )
    return {"thinking": {"type": "enabled", "budget_tokens": budget}}


def build_request(params: CompletionParams, *, stream: bool = False) -> dict[str, Any]:
    """Build keyword arguments for ``messages.create``."""
    system, messages = build_messages(params.messages)
    kwargs: dict[str, Any] = {
        "model": params.model,
        "messages": messages,
        "max_tokens": params.max_tokens,
    }
    if system:
        kwargs["system"] = system
    kwargs.update(build_thinking_kwargs(params))
    if params.tools:
        kwargs["tools"] = [
            {"name": t.id, "description": t.description, "input_schema": t.parameters}
            for t in params.tools
        ]
    if stream:
        kwargs["stream"] = True
    return kwargs


class AnthropicAdapter:
    """Anthropic Messages API adapter."""

    def __init__(self, *, client_factory: Callable[[str], Any] | None = None) -> None:
        self._client_factory = client_factory
        self._clients: dict[str, Any] = {}

    def _get_client(self, api_key: str) -> Any:
        """Return the async Anthropic client for *api_key*, creating it on first use."""
        client = self._clients.get(api_key)
        if client is not None:
            return client
        if self._client_factory is not None:
            client = self._client_factory(api_key)
        else:
            try:
                from anthropic import AsyncAnthropic
            except ImportError as e:
                raise APIError(
                    "anthropic package not installed",
                    hint="pip install anthropic",
                    provider=PROVIDER,
                ) from e
            client = AsyncAnthropic(api_key=api_key)
        self._clients[api_key] = client
        return client

    async def complete(
        self,
        api_key: str,
        params: CompletionParams,
        signal: AbortSignal | None = None,
    ) -> AiResponse:
        """Run a blocking Messages API call."""
        client = self._get_client(api_key)
        kwargs = build_request(params)
        logger.debug(
            "anthropic complete: model=%s messages=%d tools=%d",
            params.model,
            len(kwargs["messages"]),
            len(params.tools or ()),
        )
        try:
            response = await call_with_signal(
                client.messages.create(**kwargs), signal, provider=PROVIDER
            )
        except asyncio.CancelledError:
            raise
        except APIError:
            raise
        except Exception as e:
            raise wrap_provider_error(e, provider=PROVIDER, phase="complete") from e
        return _parse_response(response, fallback_model=params.model)

    async def stream(
        self,
        api_key: str,
        params: CompletionParams,
        signal: AbortSignal | None = None,
    ) -> AsyncIterator[AiStreamChunk]:
        """Stream a Messages API call as normalized chunks."""
        client = self._get_client(api_key)
        async for chunk in terminate_stream(self._stream_chunks(client, params, signal)):
            yield chunk

    async def _stream_chunks(
        self,
        client: Any,
        params: CompletionParams,
        signal: AbortSignal | None,
    ) -> AsyncIterator[AiStreamChunk]:
        kwargs = build_request(params, stream=True)
        logger.debug(
            "anthropic stream: model=%s messages=%d tools=%d",
            params.model,
            len(kwargs["messages"]),
            len(params.tools or ()),
        )
        # In-flight tool_use blocks keyed by content block index.
        tool_blocks: dict[int, dict[str, str]] = {}
        try:
            raw_stream = await call_with_signal(
                client.messages.create(**kwargs), signal, provider=PROVIDER
            )
            async for event in iterate_with_signal(raw_stream, signal, provider=PROVIDER):
                event_type = getattr(event, "type", None)
                index = getattr(event, "index", 0) or 0

                if event_type == "content_block_start":
                    block = getattr(event, "content_block", None)
                    if getattr(block, "type", None) == "tool_use":
                        tool_blocks[index] = {
                            "id": getattr(block, "id", "") or "",
                            "name": getattr(block, "name", "") or "",
                            "json": "",
                        }
                elif event_type == "content_block_delta":
                    delta = getattr(event, "delta", None)
                    delta_type = getattr(delta, "type", None)
                    if delta_type == "text_delta":
                        yield ContentChunk(getattr(delta, "text", ""))
                    elif delta_type == "thinking_delta":
                        yield ReasoningChunk(getattr(delta, "thinking", ""))
                    elif delta_type == "input_json_delta" and index in tool_blocks:
                        tool_blocks[index]["json"] += getattr(delta, "partial_json", "") or ""
                elif event_type == "content_block_stop":
                    block = tool_blocks.pop(index, None)
                    if block is not None:
                        yield ToolUseChunk(
                            id=block["id"],
                            name=block["name"],
                            input=parse_tool_arguments(block["json"]),
                        )
                elif event_type == "message_delta":
                    stop_reason = getattr(getattr(event, "delta", None), "stop_reason", None)
                    if stop_reason:
                        yield StopChunk(normalize_stop_reason(stop_reason))
        except asyncio.CancelledError:
            raise
        except APIError:
            raise
        except Exception as e:
            raise wrap_provider_error(e, provider=PROVIDER, phase="stream") from e

    async def aclose(self) -> None:
        """Close underlying async client resources."""
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            close = getattr(client, "close", None)
            if close is not None:
                await close()


def _parse_response(response: Any, *, fallback_model: str) -> AiResponse:
    """Parse an Anthropic Message into AiResponse."""
    text_parts: list[str] = []
    reasoning_parts: list[str] = []
    tool_calls: list[ToolCall] = []

    for block in getattr(response, "content", None) or []:
        block_type = getattr(block, "type", None)
        if block_type == "text":
            text_parts.append(getattr(block, "text", ""))
        elif block_type == "thinking":
            reasoning_parts.append(getattr(block, "thinking", ""))
        elif block_type == "tool_use":
            raw_input = getattr(block, "input", None)
            tool_calls.append(
                ToolCall(
                    id=getattr(block, "id", ""),
                    name=getattr(block, "name", ""),
                    arguments=raw_input if isinstance(raw_input, dict) else {},
                )
            )

    usage: Usage | None = None
    usage_raw = getattr(response, "usage", None)
    if usage_raw is not None:
        input_tokens = int(getattr(usage_raw, "input_tokens", 0) or 0)
        output_tokens = int(getattr(usage_raw, "output_tokens", 0) or 0)
        usage = Usage(
            prompt_tokens=input_tokens,
            completion_tokens=output_tokens,
            total_tokens=input_tokens + output_tokens,
        )

    reasoning = "".join(reasoning_parts)
    return AiResponse(
        content="".join(text_parts),
        reasoning=reasoning or None,
        model=getattr(response, "model", None) or fallback_model,
        usage=usage,
        finish_reason=normalize_stop_reason(getattr(response, "stop_reason", None)),
        tool_calls=tool_calls or None,
    )
