"""OpenAI-compatible Chat Completions adapter.

One class serves every vendor that speaks the Chat Completions protocol
(OpenRouter, OpenAI, xAI, z.ai); the registry parameterizes it by base URL,
default headers and reasoning field shape.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from writr.errors import APIError
from writr.providers._errors import wrap_provider_error
from writr.providers._utils import parse_tool_arguments, terminate_stream
from writr.providers.signal import call_with_signal, iterate_with_signal
from writr.types import (
    AiResponse,
    ContentChunk,
    ImagePart,
    ReasoningChunk,
    StopChunk,
    ToolCall,
    ToolUseChunk,
    Usage,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from writr.providers.signal import AbortSignal
    from writr.types import AiStreamChunk, CompletionParams, FinishReason, Message

logger = logging.getLogger(__name__)

ReasoningStyle = Literal["object", "flat"]

_FINISH_REASONS: dict[str, FinishReason] = {
    "stop": "stop",
    "length": "length",
    "content_filter": "content_filter",
    "tool_calls": "tool_use",
}

# Aggregators ignore reasoning.effort for the Claude 4.6 family; they read an
# output-effort label from ``verbosity`` instead.
_VERBOSITY_MAP = {
    "xhigh": "max",
    "high": "high",
    "medium": "medium",
    "low": "low",
    "minimal": "low",
}


def normalize_finish_reason(raw: str | None) -> FinishReason:
    """Map a Chat Completions finish_reason onto the closed set."""
    if not raw:
        return "stop"
    return _FINISH_REASONS.get(raw, "unknown")


def _is_claude_46(model: str) -> bool:
    return model.startswith("anthropic/") and ("4.6" in model or "4-6" in model)


@dataclass
class _PendingToolCall:
    id: str
    name: str
    args: str


class OpenAICompatAdapter:
    """Chat Completions adapter parameterized by vendor endpoint."""

    def __init__(
        self,
        *,
        provider: str,
        base_url: str,
        default_headers: dict[str, str] | None = None,
        reasoning_style: ReasoningStyle = "object",
        client_factory: Callable[[str], Any] | None = None,
    ) -> None:
        self.provider = provider
        self.base_url = base_url
        self.default_headers = dict(default_headers or {})
        self.reasoning_style = reasoning_style
        self._client_factory = client_factory
        self._clients: dict[str, Any] = {}

    def _get_client(self, api_key: str) -> Any:
        """Return the async client for *api_key*, creating it on first use."""
        client = self._clients.get(api_key)
        if client is not None:
            return client
        if self._client_factory is not None:
            client = self._client_factory(api_key)
        else:
            try:
                from openai import AsyncOpenAI
            except ImportError as e:
                raise APIError(
                    "openai package not installed",
                    hint="pip install openai",
                    provider=self.provider,
                ) from e
            client = AsyncOpenAI(
                api_key=api_key,
                base_url=self.base_url,
                default_headers=self.default_headers or None,
            )
        self._clients[api_key] = client
        return client

    # ------------------------------------------------------------------
    # Request translation
    # ------------------------------------------------------------------

    @staticmethod
    def _convert_message(msg: Message) -> dict[str, Any]:
        """Translate one message; cache hints are dropped here."""
        if msg.role == "tool":
            return {
                "role": "tool",
                "tool_call_id": msg.tool_call_id or "",
                "content": msg.text,
            }
        if msg.role == "assistant" and msg.tool_calls:
            return {
                "role": "assistant",
                "content": msg.text or None,
                "tool_calls": [
                    {
                        "id": tc.id,
                        "type": "function",
                        "function": {
                            "name": tc.name,
                            "arguments": json.dumps(tc.arguments),
                        },
                    }
                    for tc in msg.tool_calls
                ],
            }
        if isinstance(msg.content, str):
            return {"role": msg.role, "content": msg.content}

        parts: list[dict[str, Any]] = []
        for part in msg.content:
            if isinstance(part, ImagePart):
                parts.append({"type": "image_url", "image_url": {"url": part.url}})
            else:
                parts.append({"type": "text", "text": part.text})
        return {"role": msg.role, "content": parts}

    def _reasoning_fields(self, params: CompletionParams) -> tuple[dict[str, Any], dict[str, Any]]:
        """Return ``(standard_kwargs, extra_body)`` for the reasoning directive."""
        if not params.thinking_enabled:
            return {}, {}
        effort = params.reasoning_effort
        if _is_claude_46(params.model):
            return {}, {
                "reasoning": {"enabled": True},
                "verbosity": _VERBOSITY_MAP.get(effort or "", "medium"),
            }
        if self.reasoning_style == "flat":
            return {"reasoning_effort": effort}, {}
        return {}, {"reasoning": {"effort": effort}}

    def build_request(self, params: CompletionParams, *, stream: bool) -> dict[str, Any]:
        """Build keyword arguments for ``chat.completions.create``."""
        kwargs: dict[str, Any] = {
            "model": params.model,
            "messages": [self._convert_message(m) for m in params.messages],
            "temperature": params.temperature,
            "max_tokens": params.max_tokens,
            "stream": stream,
        }
        standard, extra_body = self._reasoning_fields(params)
        kwargs.update(standard)
        if extra_body:
            kwargs["extra_body"] = extra_body
        if params.tools:
            kwargs["tools"] = [
                {
                    "type": "function",
                    "function": {
                        "name": t.id,
                        "description": t.description,
                        "parameters": t.parameters,
                    },
                }
                for t in params.tools
            ]
        return kwargs

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    async def complete(
        self,
        api_key: str,
        params: CompletionParams,
        signal: AbortSignal | None = None,
    ) -> AiResponse:
        """Run a blocking Chat Completions call."""
        client = self._get_client(api_key)
        kwargs = self.build_request(params, stream=False)
        logger.debug(
            "%s complete: model=%s messages=%d tools=%d",
            self.provider,
            params.model,
            len(params.messages),
            len(params.tools or ()),
        )
        try:
            response = await call_with_signal(
                client.chat.completions.create(**kwargs),
                signal,
                provider=self.provider,
            )
        except asyncio.CancelledError:
            raise
        except APIError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e, provider=self.provider, phase="complete"
            ) from e
        return _parse_completion(response, fallback_model=params.model)

    async def stream(
        self,
        api_key: str,
        params: CompletionParams,
        signal: AbortSignal | None = None,
    ) -> AsyncIterator[AiStreamChunk]:
        """Stream a Chat Completions call as normalized chunks."""
        client = self._get_client(api_key)
        async for chunk in terminate_stream(self._stream_chunks(client, params, signal)):
            yield chunk

    async def _stream_chunks(
        self,
        client: Any,
        params: CompletionParams,
        signal: AbortSignal | None,
    ) -> AsyncIterator[AiStreamChunk]:
        kwargs = self.build_request(params, stream=True)
        logger.debug(
            "%s stream: model=%s messages=%d tools=%d",
            self.provider,
            params.model,
            len(params.messages),
            len(params.tools or ()),
        )
        pending: dict[int, _PendingToolCall] = {}
        try:
            raw_stream = await call_with_signal(
                client.chat.completions.create(**kwargs),
                signal,
                provider=self.provider,
            )
            async for event in iterate_with_signal(
                raw_stream, signal, provider=self.provider
            ):
                choices = getattr(event, "choices", None) or []
                choice = choices[0] if choices else None
                if choice is None:
                    continue
                delta = getattr(choice, "delta", None)
                if delta is not None:
                    for text in _delta_reasoning(delta):
                        yield ReasoningChunk(text)
                    content = getattr(delta, "content", None)
                    if content:
                        yield ContentChunk(content)
                    for tc in getattr(delta, "tool_calls", None) or []:
                        _accumulate_tool_call(pending, tc)

                finish_reason = getattr(choice, "finish_reason", None)
                if finish_reason:
                    for index in sorted(pending):
                        call = pending[index]
                        yield ToolUseChunk(
                            id=call.id,
                            name=call.name,
                            input=parse_tool_arguments(call.args),
                        )
                    pending.clear()
                    yield StopChunk(normalize_finish_reason(finish_reason))
        except asyncio.CancelledError:
            raise
        except APIError:
            raise
        except Exception as e:
            raise wrap_provider_error(e, provider=self.provider, phase="stream") from e

    async def aclose(self) -> None:
        """Close underlying async client resources."""
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            close = getattr(client, "close", None)
            if close is not None:
                await close()


def _field(obj: Any, name: str) -> Any:
    # Vendor extensions arrive as plain dicts inside SDK models.
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _delta_reasoning(delta: Any) -> list[str]:
    details = _field(delta, "reasoning_details")
    if isinstance(details, list):
        return [text for d in details if (text := _field(d, "text"))]
    reasoning = _field(delta, "reasoning")
    return [reasoning] if isinstance(reasoning, str) and reasoning else []


def _accumulate_tool_call(pending: dict[int, _PendingToolCall], tc: Any) -> None:
    index = _field(tc, "index") or 0
    function = _field(tc, "function")
    name = _field(function, "name") if function is not None else None
    args = _field(function, "arguments") if function is not None else None
    existing = pending.get(index)
    if existing is None:
        pending[index] = _PendingToolCall(
            id=_field(tc, "id") or "",
            name=name or "",
            args=args or "",
        )
    else:
        existing.args += args or ""


def _parse_completion(response: Any, *, fallback_model: str) -> AiResponse:
    choices = getattr(response, "choices", None) or []
    choice = choices[0] if choices else None
    message = getattr(choice, "message", None)

    tool_calls: list[ToolCall] = []
    for tc in getattr(message, "tool_calls", None) or []:
        if getattr(tc, "type", "function") != "function":
            continue
        function = getattr(tc, "function", None)
        tool_calls.append(
            ToolCall(
                id=getattr(tc, "id", "") or "",
                name=getattr(function, "name", "") or "",
                arguments=parse_tool_arguments(getattr(function, "arguments", None)),
            )
        )

    usage: Usage | None = None
    usage_raw = getattr(response, "usage", None)
    if usage_raw is not None:
        usage = Usage(
            prompt_tokens=int(getattr(usage_raw, "prompt_tokens", 0) or 0),
            completion_tokens=int(getattr(usage_raw, "completion_tokens", 0) or 0),
            total_tokens=int(getattr(usage_raw, "total_tokens", 0) or 0),
        )

    reasoning = _field(message, "reasoning") if message is not None else None
    return AiResponse(
        content=getattr(message, "content", None) or "",
        reasoning=reasoning if isinstance(reasoning, str) and reasoning else None,
        model=getattr(response, "model", None) or fallback_model,
        usage=usage,
        finish_reason=normalize_finish_reason(getattr(choice, "finish_reason", None)),
        tool_calls=tool_calls or None,
    )
