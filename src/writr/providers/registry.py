"""Provider registry: the one place vendor-specific wiring lives.

Supported providers:
  openrouter    -> OpenAICompatAdapter (openrouter.ai/api/v1)
  openai        -> OpenAICompatAdapter (api.openai.com/v1)
  grok          -> OpenAICompatAdapter (api.x.ai/v1)
  zai           -> OpenAICompatAdapter (api.z.ai/api/paas/v4)
  anthropic     -> AnthropicAdapter
  google        -> GoogleAdapter, API-key mode
  google-vertex -> GoogleAdapter, Vertex mode (key is ``project[:location]``)
"""

from __future__ import annotations

from dataclasses import dataclass

from writr.errors import ConfigurationError
from writr.providers.anthropic import AnthropicAdapter
from writr.providers.base import ProviderAdapter
from writr.providers.gemini import GoogleAdapter
from writr.providers.openai import OpenAICompatAdapter


@dataclass(frozen=True)
class ProviderInfo:
    """Static description of one provider entry."""

    id: str
    label: str
    adapter: ProviderAdapter
    default_model: str
    api_key_hint: str
    api_key_env: str


def _openai_compat(
    provider_id: str,
    label: str,
    base_url: str,
    default_model: str,
    api_key_hint: str,
    api_key_env: str,
    *,
    headers: dict[str, str] | None = None,
    reasoning_style: str = "object",
) -> ProviderInfo:
    return ProviderInfo(
        id=provider_id,
        label=label,
        adapter=OpenAICompatAdapter(
            provider=provider_id,
            base_url=base_url,
            default_headers=headers,
            reasoning_style=reasoning_style,  # type: ignore[arg-type]
        ),
        default_model=default_model,
        api_key_hint=api_key_hint,
        api_key_env=api_key_env,
    )


PROVIDERS: dict[str, ProviderInfo] = {
    "openrouter": _openai_compat(
        "openrouter",
        "OpenRouter",
        "https://openrouter.ai/api/v1",
        "openai/gpt-4o",
        "sk-or-...",
        "OPENROUTER_API_KEY",
        headers={"HTTP-Referer": "https://writr.app", "X-Title": "writr"},
    ),
    "anthropic": ProviderInfo(
        id="anthropic",
        label="Anthropic",
        adapter=AnthropicAdapter(),
        default_model="claude-sonnet-4-5-20250929",
        api_key_hint="sk-ant-...",
        api_key_env="ANTHROPIC_API_KEY",
    ),
    "openai": _openai_compat(
        "openai",
        "OpenAI",
        "https://api.openai.com/v1",
        "gpt-4o",
        "sk-...",
        "OPENAI_API_KEY",
        reasoning_style="flat",
    ),
    "grok": _openai_compat(
        "grok",
        "Grok (xAI)",
        "https://api.x.ai/v1",
        "grok-3",
        "xai-...",
        "XAI_API_KEY",
        reasoning_style="flat",
    ),
    "zai": _openai_compat(
        "zai",
        "z.ai (Zhipu AI)",
        "https://api.z.ai/api/paas/v4",
        "glm-4.7",
        "",
        "ZAI_API_KEY",
    ),
    "google": ProviderInfo(
        id="google",
        label="Google Gemini",
        adapter=GoogleAdapter(mode="api-key"),
        default_model="gemini-2.5-flash",
        api_key_hint="AIza...",
        api_key_env="GEMINI_API_KEY",
    ),
    "google-vertex": ProviderInfo(
        id="google-vertex",
        label="Google Vertex AI",
        adapter=GoogleAdapter(mode="vertex"),
        default_model="gemini-2.5-flash",
        api_key_hint="my-project:us-central1",
        api_key_env="GOOGLE_VERTEX_PROJECT",
    ),
}


def get_provider(provider_id: str) -> ProviderInfo:
    """Look up a provider entry by id."""
    try:
        return PROVIDERS[provider_id]
    except KeyError:
        available = ", ".join(sorted(PROVIDERS))
        raise ConfigurationError(
            f"Unknown provider: {provider_id!r}",
            hint=f"Use one of: {available}",
        ) from None


def get_adapter(provider_id: str) -> ProviderAdapter:
    """Return the adapter registered for *provider_id*."""
    return get_provider(provider_id).adapter


def default_provider_models() -> dict[str, str]:
    """Map every provider id to its default model."""
    return {p.id: p.default_model for p in PROVIDERS.values()}
