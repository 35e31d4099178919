"""Provider adapters and the provider registry."""

from .anthropic import AnthropicAdapter
from .base import ProviderAdapter
from .gemini import GoogleAdapter
from .mock import MockAdapter
from .openai import OpenAICompatAdapter
from .registry import (
    PROVIDERS,
    ProviderInfo,
    default_provider_models,
    get_adapter,
    get_provider,
)
from .signal import AbortSignal

__all__ = [
    "PROVIDERS",
    "AbortSignal",
    "AnthropicAdapter",
    "GoogleAdapter",
    "MockAdapter",
    "OpenAICompatAdapter",
    "ProviderAdapter",
    "ProviderInfo",
    "default_provider_models",
    "get_adapter",
    "get_provider",
]
