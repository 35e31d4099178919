"""Writr: an AI completion gateway for novel-writing tools.

Public API:
    - call_ai() / stream_ai(): Run a writing task against a configured provider
    - build_messages(): Assemble the prompt for a task
    - execute_tool() / dispatch_tool_calls(): Run model tool calls over project data
    - Config: Configuration dataclass
"""

from __future__ import annotations

import logging

from writr.client import build_completion_params, call_ai, stream_ai
from writr.config import Config
from writr.errors import (
    APIError,
    ConfigurationError,
    RateLimitError,
    RequestAbortedError,
    WritrError,
)
from writr.prompts import AiContext, PromptOptions, build_messages
from writr.providers import AbortSignal, get_adapter, get_provider
from writr.tools import (
    AI_TOOLS,
    ToolExecutionContext,
    ToolResult,
    dispatch_tool_calls,
    execute_tool,
    get_tool_definitions_for_model,
)
from writr.types import (
    AiResponse,
    AiStreamChunk,
    CompletionParams,
    ContentChunk,
    ImagePart,
    Message,
    ReasoningChunk,
    StopChunk,
    TextPart,
    ToolCall,
    ToolSpec,
    ToolUseChunk,
)

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("writr-ai")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("writr").addHandler(logging.NullHandler())

__all__ = [
    "AI_TOOLS",
    "APIError",
    "AbortSignal",
    "AiContext",
    "AiResponse",
    "AiStreamChunk",
    "CompletionParams",
    "Config",
    "ConfigurationError",
    "ContentChunk",
    "ImagePart",
    "Message",
    "PromptOptions",
    "RateLimitError",
    "ReasoningChunk",
    "RequestAbortedError",
    "StopChunk",
    "TextPart",
    "ToolCall",
    "ToolExecutionContext",
    "ToolResult",
    "ToolSpec",
    "ToolUseChunk",
    "WritrError",
    "build_completion_params",
    "build_messages",
    "call_ai",
    "dispatch_tool_calls",
    "execute_tool",
    "get_adapter",
    "get_provider",
    "get_tool_definitions_for_model",
    "stream_ai",
]
