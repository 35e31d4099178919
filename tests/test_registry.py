"""Provider registry lookups."""

from __future__ import annotations

import pytest

from writr.errors import ConfigurationError
from writr.providers import (
    PROVIDERS,
    AnthropicAdapter,
    GoogleAdapter,
    OpenAICompatAdapter,
    ProviderAdapter,
    default_provider_models,
    get_adapter,
    get_provider,
)

pytestmark = pytest.mark.unit


def test_registry_lists_every_supported_provider() -> None:
    assert set(PROVIDERS) == {
        "openrouter",
        "openai",
        "grok",
        "zai",
        "anthropic",
        "google",
        "google-vertex",
    }


@pytest.mark.parametrize("provider_id", sorted(PROVIDERS))
def test_every_adapter_satisfies_the_protocol(provider_id: str) -> None:
    assert isinstance(get_adapter(provider_id), ProviderAdapter)


@pytest.mark.parametrize(
    ("provider_id", "adapter_type"),
    [
        ("openrouter", OpenAICompatAdapter),
        ("openai", OpenAICompatAdapter),
        ("grok", OpenAICompatAdapter),
        ("zai", OpenAICompatAdapter),
        ("anthropic", AnthropicAdapter),
        ("google", GoogleAdapter),
        ("google-vertex", GoogleAdapter),
    ],
)
def test_adapter_families(provider_id: str, adapter_type: type) -> None:
    assert type(get_adapter(provider_id)) is adapter_type


def test_adapters_are_shared_instances() -> None:
    assert get_adapter("anthropic") is get_adapter("anthropic")


def test_unknown_provider_raises_configuration_error() -> None:
    with pytest.raises(ConfigurationError) as exc:
        get_provider("acme")
    assert "acme" in str(exc.value)
    assert exc.value.hint is not None
    assert "openrouter" in exc.value.hint


def test_openai_compatible_endpoints() -> None:
    urls = {pid: get_adapter(pid).base_url for pid in ("openrouter", "openai", "grok", "zai")}
    assert urls == {
        "openrouter": "https://openrouter.ai/api/v1",
        "openai": "https://api.openai.com/v1",
        "grok": "https://api.x.ai/v1",
        "zai": "https://api.z.ai/api/paas/v4",
    }


def test_openrouter_sends_attribution_headers() -> None:
    adapter = get_adapter("openrouter")
    assert adapter.default_headers == {"HTTP-Referer": "https://writr.app", "X-Title": "writr"}


@pytest.mark.parametrize(
    ("provider_id", "style"),
    [("openrouter", "object"), ("zai", "object"), ("openai", "flat"), ("grok", "flat")],
)
def test_reasoning_field_style(provider_id: str, style: str) -> None:
    assert get_adapter(provider_id).reasoning_style == style


def test_google_modes() -> None:
    assert get_adapter("google").mode == "api-key"
    assert get_adapter("google-vertex").mode == "vertex"
    assert get_adapter("google-vertex").provider == "google-vertex"


def test_default_models_cover_every_provider() -> None:
    defaults = default_provider_models()
    assert set(defaults) == set(PROVIDERS)
    assert all(defaults.values())
    assert defaults["google"] == "gemini-2.5-flash"
