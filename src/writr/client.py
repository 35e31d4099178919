"""Task-level entry points: build the prompt, pick the adapter, call it."""

from __future__ import annotations

from dataclasses import replace
import logging
from typing import TYPE_CHECKING

from writr.prompts.builder import PromptOptions, build_messages
from writr.providers.mock import MockAdapter
from writr.providers.registry import get_adapter
from writr.tools.registry import get_tool_definitions_for_model
from writr.types import CompletionParams

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence

    from writr.config import Config
    from writr.prompts.builder import AiContext
    from writr.providers.base import ProviderAdapter
    from writr.providers.signal import AbortSignal
    from writr.types import AiResponse, AiStreamChunk, Message

logger = logging.getLogger(__name__)

PROSE_TEMPERATURE = 1.0
DEFAULT_TEMPERATURE = 0.5

_mock_adapter = MockAdapter()


def task_temperature(task: str, config: Config) -> float:
    """Config override first, then 1.0 for prose generation and 0.5 for everything else."""
    if config.temperature is not None:
        return config.temperature
    return PROSE_TEMPERATURE if task == "generate-prose" else DEFAULT_TEMPERATURE


def resolve_adapter(config: Config) -> ProviderAdapter:
    if config.use_mock:
        return _mock_adapter
    return get_adapter(config.provider)


def build_completion_params(
    task: str,
    prompt: str,
    context: AiContext,
    config: Config,
    *,
    history: Sequence[Message] = (),
    options: PromptOptions | None = None,
    tools: bool = False,
) -> CompletionParams:
    """Assemble the CompletionParams for one task call.

    Post-chat instructions from *config* apply unless *options* already sets them.
    """
    opts = options or PromptOptions()
    if config.post_chat_instructions and not opts.post_chat_instructions:
        opts = replace(
            opts,
            post_chat_instructions=config.post_chat_instructions,
            post_chat_instructions_depth=config.post_chat_instructions_depth,
        )
    if tools != opts.tools_enabled:
        opts = replace(opts, tools_enabled=tools)

    messages = build_messages(task, prompt, context, history, opts)
    return CompletionParams(
        model=config.model or "",
        messages=messages,
        temperature=task_temperature(task, config),
        max_tokens=config.max_tokens,
        reasoning_effort=config.reasoning_effort,
        tools=get_tool_definitions_for_model() if tools else None,
    )


async def call_ai(
    task: str,
    prompt: str,
    context: AiContext,
    config: Config,
    *,
    history: Sequence[Message] = (),
    options: PromptOptions | None = None,
    tools: bool = False,
    signal: AbortSignal | None = None,
) -> AiResponse:
    """Run *task* against the configured provider and return the full response.

    Example:
        config = Config(provider="anthropic")
        response = await call_ai("brainstorm", "Three twists for act two", ctx, config)
        print(response.content)
    """
    params = build_completion_params(
        task, prompt, context, config, history=history, options=options, tools=tools
    )
    adapter = resolve_adapter(config)
    logger.debug(
        "call_ai task=%s provider=%s model=%s mock=%s",
        task,
        config.provider,
        params.model,
        config.use_mock,
    )
    return await adapter.complete(config.api_key or "", params, signal)


async def stream_ai(
    task: str,
    prompt: str,
    context: AiContext,
    config: Config,
    *,
    history: Sequence[Message] = (),
    options: PromptOptions | None = None,
    tools: bool = False,
    signal: AbortSignal | None = None,
) -> AsyncIterator[AiStreamChunk]:
    """Stream *task* from the configured provider. The last chunk is always a StopChunk."""
    params = build_completion_params(
        task, prompt, context, config, history=history, options=options, tools=tools
    )
    adapter = resolve_adapter(config)
    logger.debug(
        "stream_ai task=%s provider=%s model=%s mock=%s",
        task,
        config.provider,
        params.model,
        config.use_mock,
    )
    async for chunk in adapter.stream(config.api_key or "", params, signal):
        yield chunk
