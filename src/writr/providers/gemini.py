"""Google generative-content adapter (Gemini API and Vertex AI)."""

from __future__ import annotations

import asyncio
import base64
import binascii
import json
import logging
import uuid
from typing import TYPE_CHECKING, Any, Literal

from writr.errors import APIError
from writr.providers._errors import wrap_provider_error
from writr.providers._utils import parse_base64_image_data_url, terminate_stream
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

GoogleMode = Literal["api-key", "vertex"]

DEFAULT_VERTEX_LOCATION = "us-central1"
_FINISH_REASONS: dict[str, FinishReason] = {
    "STOP": "stop",
    "MAX_TOKENS": "length",
    "SAFETY": "content_filter",
    "BLOCKLIST": "content_filter",
}
THINKING_BUDGETS: dict[str, int] = {
    "minimal": 128,
    "low": 1024,
    "medium": 8192,
    "high": 24576,
    "xhigh": 32768,
}
_DEFAULT_THINKING_BUDGET = 8192


def normalize_finish_reason(raw: Any) -> FinishReason:
    """Map a Gemini finish reason (enum or string) onto the closed set."""
    if raw is None:
        return "stop"
    value = getattr(raw, "value", raw)
    if not value:
        return "stop"
    return _FINISH_REASONS.get(str(value), "unknown")


def parse_vertex_key(key: str) -> tuple[str, str]:
    """Split a ``project[:location]`` credential string."""
    project, _, location = key.partition(":")
    return project, location or DEFAULT_VERTEX_LOCATION


def _new_call_id() -> str:
    return f"google-tc-{uuid.uuid4()}"


def _convert_part(part: ContentPart) -> Any:
    """Convert one content part; cache hints have no Gemini equivalent."""
    from google.genai import types

    if isinstance(part, TextPart):
        return types.Part.from_text(text=part.text)
    parsed = parse_base64_image_data_url(part.url)
    if parsed is not None:
        mime_type, data = parsed
        try:
            return types.Part.from_bytes(data=base64.b64decode(data), mime_type=mime_type)
        except (binascii.Error, ValueError):
            logger.debug("Undecodable image data URL; sending placeholder instead")
    return types.Part.from_text(text=f"[Image: {part.url}]")


def _function_response_payload(content: str) -> dict[str, Any]:
    try:
        parsed = json.loads(content) if content else {}
    except ValueError:
        return {"result": content}
    return parsed if isinstance(parsed, dict) else {"result": parsed}


def build_contents(messages: list[Message]) -> tuple[str | None, list[Any]]:
    """Split *messages* into ``(system_instruction, contents)``."""
    from google.genai import types

    system_parts: list[str] = []
    contents: list[Any] = []
    call_id_to_name: dict[str, str] = {}

    for msg in messages:
        if msg.role == "system":
            system_parts.extend(p.text for p in msg.parts if isinstance(p, TextPart))
        elif msg.role == "tool":
            call_id = msg.tool_call_id or ""
            contents.append(
                types.Content(
                    role="user",
                    parts=[
                        types.Part.from_function_response(
                            name=call_id_to_name.get(call_id, call_id or "unknown"),
                            response=_function_response_payload(msg.text),
                        )
                    ],
                )
            )
        elif msg.role == "assistant" and msg.tool_calls:
            parts: list[Any] = []
            if msg.text:
                parts.append(types.Part.from_text(text=msg.text))
            for tc in msg.tool_calls:
                call_id_to_name[tc.id] = tc.name
                parts.append(types.Part.from_function_call(name=tc.name, args=tc.arguments))
            contents.append(types.Content(role="model", parts=parts))
        else:
            role = "model" if msg.role == "assistant" else "user"
            if isinstance(msg.content, str):
                parts = [types.Part.from_text(text=msg.content)]
            else:
                parts = [_convert_part(p) for p in msg.content]
            contents.append(types.Content(role=role, parts=parts))

    system_instruction = "\n\n".join(system_parts) if system_parts else None
    return system_instruction, contents


def build_request(params: CompletionParams) -> dict[str, Any]:
    """Build keyword arguments for ``aio.models.generate_content[_stream]``."""
    from google.genai import types

    system_instruction, contents = build_contents(params.messages)
    config_kwargs: dict[str, Any] = {
        "temperature": params.temperature,
        "max_output_tokens": params.max_tokens,
    }
    if system_instruction:
        config_kwargs["system_instruction"] = system_instruction
    if params.thinking_enabled:
        config_kwargs["thinking_config"] = types.ThinkingConfig(
            include_thoughts=True,
            thinking_budget=THINKING_BUDGETS.get(
                params.reasoning_effort or "", _DEFAULT_THINKING_BUDGET
            ),
        )
    if params.tools:
        config_kwargs["tools"] = [
            types.Tool(
                function_declarations=[
                    types.FunctionDeclaration(
                        name=t.id,
                        description=t.description,
                        parameters_json_schema=t.parameters,
                    )
                    for t in params.tools
                ]
            )
        ]
    return {
        "model": params.model,
        "contents": contents,
        "config": types.GenerateContentConfig(**config_kwargs),
    }


def _candidate_parts(response: Any) -> tuple[Any, list[Any]]:
    candidates = getattr(response, "candidates", None) or []
    candidate = candidates[0] if candidates else None
    content = getattr(candidate, "content", None)
    return candidate, list(getattr(content, "parts", None) or [])


def _tool_call_from_part(part: Any) -> ToolCall | None:
    fc = getattr(part, "function_call", None)
    if fc is None:
        return None
    args = getattr(fc, "args", None)
    return ToolCall(
        id=getattr(fc, "id", None) or _new_call_id(),
        name=getattr(fc, "name", None) or "",
        arguments=dict(args) if isinstance(args, dict) else {},
    )


class GoogleAdapter:
    """Gemini adapter in API-key mode or Vertex (``project[:location]``) mode."""

    def __init__(
        self,
        *,
        mode: GoogleMode = "api-key",
        client_factory: Callable[[str], Any] | None = None,
    ) -> None:
        self.mode = mode
        self.provider = "google-vertex" if mode == "vertex" else "google"
        self._client_factory = client_factory
        self._clients: dict[str, Any] = {}

    def _get_client(self, api_key: str) -> Any:
        """Return the genai client for *api_key*, creating it on first use."""
        client = self._clients.get(api_key)
        if client is not None:
            return client
        if self._client_factory is not None:
            client = self._client_factory(api_key)
        else:
            try:
                from google import genai
            except ImportError as e:
                raise APIError(
                    "google-genai package not installed",
                    hint="pip install google-genai",
                    provider=self.provider,
                ) from e
            if self.mode == "vertex":
                project, location = parse_vertex_key(api_key)
                client = genai.Client(vertexai=True, project=project, location=location)
            else:
                client = genai.Client(api_key=api_key)
        self._clients[api_key] = client
        return client

    async def complete(
        self,
        api_key: str,
        params: CompletionParams,
        signal: AbortSignal | None = None,
    ) -> AiResponse:
        """Run a blocking generate_content call."""
        client = self._get_client(api_key)
        kwargs = build_request(params)
        logger.debug(
            "%s complete: model=%s contents=%d tools=%d",
            self.provider,
            params.model,
            len(kwargs["contents"]),
            len(params.tools or ()),
        )
        try:
            response = await call_with_signal(
                client.aio.models.generate_content(**kwargs),
                signal,
                provider=self.provider,
            )
        except asyncio.CancelledError:
            raise
        except APIError:
            raise
        except Exception as e:
            raise wrap_provider_error(e, provider=self.provider, phase="complete") from e
        return _parse_response(response, model=params.model)

    async def stream(
        self,
        api_key: str,
        params: CompletionParams,
        signal: AbortSignal | None = None,
    ) -> AsyncIterator[AiStreamChunk]:
        """Stream a generate_content call as normalized chunks."""
        client = self._get_client(api_key)
        async for chunk in terminate_stream(self._stream_chunks(client, params, signal)):
            yield chunk

    async def _stream_chunks(
        self,
        client: Any,
        params: CompletionParams,
        signal: AbortSignal | None,
    ) -> AsyncIterator[AiStreamChunk]:
        kwargs = build_request(params)
        logger.debug(
            "%s stream: model=%s contents=%d tools=%d",
            self.provider,
            params.model,
            len(kwargs["contents"]),
            len(params.tools or ()),
        )
        saw_tool_call = False
        try:
            raw_stream = await call_with_signal(
                client.aio.models.generate_content_stream(**kwargs),
                signal,
                provider=self.provider,
            )
            async for response in iterate_with_signal(
                raw_stream, signal, provider=self.provider
            ):
                candidate, parts = _candidate_parts(response)
                for part in parts:
                    text = getattr(part, "text", None)
                    if getattr(part, "thought", False):
                        if text:
                            yield ReasoningChunk(text)
                        continue
                    call = _tool_call_from_part(part)
                    if call is not None:
                        # Gemini sends whole function calls, never partial JSON.
                        saw_tool_call = True
                        yield ToolUseChunk(id=call.id, name=call.name, input=call.arguments)
                    elif text:
                        yield ContentChunk(text)

                finish_reason = getattr(candidate, "finish_reason", None)
                if finish_reason:
                    yield StopChunk(
                        "tool_use" if saw_tool_call else normalize_finish_reason(finish_reason)
                    )
        except asyncio.CancelledError:
            raise
        except APIError:
            raise
        except Exception as e:
            raise wrap_provider_error(e, provider=self.provider, phase="stream") from e


def _parse_response(response: Any, *, model: str) -> AiResponse:
    """Parse a GenerateContentResponse into AiResponse."""
    candidate, parts = _candidate_parts(response)
    text_parts: list[str] = []
    reasoning_parts: list[str] = []
    tool_calls: list[ToolCall] = []

    for part in parts:
        text = getattr(part, "text", None)
        if getattr(part, "thought", False):
            reasoning_parts.append(text or "")
            continue
        call = _tool_call_from_part(part)
        if call is not None:
            tool_calls.append(call)
        elif text:
            text_parts.append(text)

    usage: Usage | None = None
    um = getattr(response, "usage_metadata", None)
    if um is not None:
        usage = Usage(
            prompt_tokens=int(getattr(um, "prompt_token_count", 0) or 0),
            completion_tokens=int(getattr(um, "candidates_token_count", 0) or 0),
            total_tokens=int(getattr(um, "total_token_count", 0) or 0),
        )

    reasoning = "".join(reasoning_parts)
    return AiResponse(
        content="".join(text_parts),
        reasoning=reasoning or None,
        model=model,
        usage=usage,
        finish_reason=(
            "tool_use"
            if tool_calls
            else normalize_finish_reason(getattr(candidate, "finish_reason", None))
        ),
        tool_calls=tool_calls or None,
    )
