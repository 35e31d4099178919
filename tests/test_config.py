"""Configuration resolution and validation."""

from __future__ import annotations

import pytest

from writr.config import DEFAULT_MAX_TOKENS, Config
from writr.errors import ConfigurationError

pytestmark = pytest.mark.unit


def test_model_defaults_from_registry_and_key_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")
    config = Config(provider="anthropic")

    assert config.api_key == "sk-ant-test"
    assert config.model
    assert config.max_tokens == DEFAULT_MAX_TOKENS == 24 * 1024
    assert config.reasoning_effort == "none"


@pytest.mark.parametrize(
    ("provider", "env_var"),
    [
        ("openrouter", "OPENROUTER_API_KEY"),
        ("openai", "OPENAI_API_KEY"),
        ("grok", "XAI_API_KEY"),
        ("zai", "ZAI_API_KEY"),
        ("google", "GEMINI_API_KEY"),
        ("google-vertex", "GOOGLE_VERTEX_PROJECT"),
    ],
)
def test_api_key_env_var_per_provider(
    monkeypatch: pytest.MonkeyPatch, provider: str, env_var: str
) -> None:
    monkeypatch.setenv(env_var, "value-from-env")
    assert Config(provider=provider).api_key == "value-from-env"


def test_explicit_model_and_key_win() -> None:
    config = Config(provider="openai", model="gpt-custom", api_key="sk-explicit")
    assert config.model == "gpt-custom"
    assert config.api_key == "sk-explicit"


def test_missing_key_raises_with_env_var_hint() -> None:
    with pytest.raises(ConfigurationError) as exc:
        Config(provider="openrouter")
    assert exc.value.hint is not None
    assert "OPENROUTER_API_KEY" in exc.value.hint


def test_mock_mode_needs_no_key() -> None:
    config = Config(provider="anthropic", use_mock=True)
    assert config.api_key is None
    assert config.use_mock is True


@pytest.mark.parametrize(
    "kwargs",
    [
        {"provider": "nope"},
        {"provider": "openai", "reasoning_effort": "extreme"},
        {"provider": "openai", "max_tokens": 0},
        {"provider": "openai", "post_chat_instructions_depth": -1},
    ],
)
def test_invalid_configuration_raises_with_hint(kwargs: dict) -> None:
    with pytest.raises(ConfigurationError) as exc:
        Config(use_mock=True, **kwargs)
    assert exc.value.hint


def test_repr_redacts_api_key() -> None:
    config = Config(provider="openai", api_key="sk-secret-value")
    assert "sk-secret-value" not in repr(config)
    assert "sk-secret-value" not in str(config)
    assert "[REDACTED]" in repr(config)


def test_config_is_frozen() -> None:
    config = Config(provider="openai", use_mock=True)
    with pytest.raises(AttributeError):
        config.model = "other"  # type: ignore[misc]
