"""Configuration: frozen Config resolved against the provider registry."""

from __future__ import annotations

from dataclasses import dataclass
import os

from dotenv import load_dotenv

from writr.errors import ConfigurationError
from writr.providers.registry import PROVIDERS
from writr.types import REASONING_EFFORTS, ReasoningEffort

load_dotenv()

DEFAULT_MAX_TOKENS = 24 * 1024


@dataclass(frozen=True)
class Config:
    """Immutable configuration for writr AI calls.

    Provider is required. The model falls back to the provider's default and
    the API key is auto-resolved from the provider's environment variable.

    Example:
        config = Config(provider="anthropic")
        # API key is resolved from ANTHROPIC_API_KEY
    """

    provider: str
    model: str | None = None
    #: Auto-resolved from the provider's env var (e.g. ``OPENROUTER_API_KEY``) when *None*.
    api_key: str | None = None
    use_mock: bool = False
    max_tokens: int = DEFAULT_MAX_TOKENS
    #: Overrides the per-task temperature when set.
    temperature: float | None = None
    reasoning_effort: ReasoningEffort = "none"
    #: Appended to a recent user turn on every call (see ``post_chat_instructions_depth``).
    post_chat_instructions: str | None = None
    post_chat_instructions_depth: int = 0

    def __post_init__(self) -> None:
        """Resolve defaults and validate configuration."""
        info = PROVIDERS.get(self.provider)
        if info is None:
            available = ", ".join(f"'{p}'" for p in sorted(PROVIDERS))
            raise ConfigurationError(
                f"Unknown provider: {self.provider!r}",
                hint=f"Supported providers: {available}",
            )

        if self.reasoning_effort not in REASONING_EFFORTS:
            raise ConfigurationError(
                f"Unknown reasoning effort: {self.reasoning_effort!r}",
                hint=f"Use one of: {', '.join(REASONING_EFFORTS)}",
            )
        if self.max_tokens < 1:
            raise ConfigurationError(
                f"max_tokens must be ≥ 1, got {self.max_tokens}",
                hint="This caps the number of output tokens per call.",
            )
        if self.post_chat_instructions_depth < 0:
            raise ConfigurationError(
                f"post_chat_instructions_depth must be ≥ 0, got {self.post_chat_instructions_depth}",
                hint="0 targets the most recent user message.",
            )

        if not self.model:
            object.__setattr__(self, "model", info.default_model)

        if self.api_key is None and not self.use_mock:
            object.__setattr__(self, "api_key", os.environ.get(info.api_key_env))

        if not self.use_mock and not self.api_key:
            raise ConfigurationError(
                f"API key required for {self.provider}",
                hint=f"Set {info.api_key_env} environment variable or pass api_key=...",
            )

    def __str__(self) -> str:
        """Return a redacted, developer-friendly representation."""
        return (
            f"Config(provider={self.provider!r}, model={self.model!r}, "
            f"api_key={'[REDACTED]' if self.api_key else None}, use_mock={self.use_mock})"
        )

    __repr__ = __str__
