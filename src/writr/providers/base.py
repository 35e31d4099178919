"""Adapter protocol: the two calls every provider family implements."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from writr.providers.signal import AbortSignal
    from writr.types import AiResponse, AiStreamChunk, CompletionParams


@runtime_checkable
class ProviderAdapter(Protocol):
    """Translate CompletionParams to one provider family and back."""

    async def complete(
        self,
        api_key: str,
        params: CompletionParams,
        signal: AbortSignal | None = None,
    ) -> AiResponse:
        """Run a blocking completion."""
        ...

    def stream(
        self,
        api_key: str,
        params: CompletionParams,
        signal: AbortSignal | None = None,
    ) -> AsyncIterator[AiStreamChunk]:
        """Stream a completion; the final chunk is always a StopChunk."""
        ...
