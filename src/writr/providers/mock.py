"""Mock adapter for testing."""

from __future__ import annotations

from typing import TYPE_CHECKING

from writr.providers.signal import call_with_signal
from writr.types import AiResponse, ContentChunk, StopChunk, Usage

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from writr.providers.signal import AbortSignal
    from writr.types import AiStreamChunk, CompletionParams


async def _echo(params: CompletionParams) -> str:
    last_user = next((m for m in reversed(params.messages) if m.role == "user"), None)
    text = last_user.text if last_user is not None else ""
    return f"echo: {text[:100]}"


class MockAdapter:
    """Adapter that never touches the network.

    Echoes the last user turn so mock-mode runs stay informative.
    """

    async def complete(
        self,
        api_key: str,  # noqa: ARG002
        params: CompletionParams,
        signal: AbortSignal | None = None,
    ) -> AiResponse:
        """Return a deterministic mock response."""
        text = await call_with_signal(_echo(params), signal, provider="mock")
        return AiResponse(
            content=text,
            model=params.model,
            usage=Usage(prompt_tokens=10, completion_tokens=10, total_tokens=20),
        )

    async def stream(
        self,
        api_key: str,  # noqa: ARG002
        params: CompletionParams,
        signal: AbortSignal | None = None,
    ) -> AsyncIterator[AiStreamChunk]:
        """Yield the echo as a single content chunk, then stop."""
        text = await call_with_signal(_echo(params), signal, provider="mock")
        yield ContentChunk(text)
        yield StopChunk("stop")
