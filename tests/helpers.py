"""Test helpers (small, reusable doubles).

Fake SDK clients mirror only the attribute paths the adapters call and record
the keyword arguments they receive, so tests can characterize exact request
shapes without network access.
"""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any

from writr.types import CompletionParams, Message


def ns(**kwargs: Any) -> SimpleNamespace:
    return SimpleNamespace(**kwargs)


def params_for(
    messages: list[Message] | None = None,
    *,
    model: str = "test-model",
    **kwargs: Any,
) -> CompletionParams:
    return CompletionParams(
        model=model,
        messages=messages or [Message(role="user", content="Hello")],
        **kwargs,
    )


async def collect(stream: Any) -> list[Any]:
    return [chunk async for chunk in stream]


class FakeStream:
    """Async iterator over scripted events.

    ``gate`` (when set) blocks before each event after the first, so tests can
    abort mid-stream. ``closed`` records whether the consumer closed it.
    """

    def __init__(
        self,
        events: list[Any],
        *,
        gate: asyncio.Event | None = None,
        error: BaseException | None = None,
    ) -> None:
        self._events = list(events)
        self._gate = gate
        self._error = error
        self._sent = 0
        self.closed = False

    def __aiter__(self) -> FakeStream:
        return self

    async def __anext__(self) -> Any:
        if self._gate is not None and self._sent > 0:
            await self._gate.wait()
        if not self._events:
            if self._error is not None:
                raise self._error
            raise StopAsyncIteration
        self._sent += 1
        return self._events.pop(0)

    async def aclose(self) -> None:
        self.closed = True


class _Recorder:
    """Callable endpoint that records kwargs and returns or raises scripted results."""

    def __init__(self, result: Any = None, *, error: BaseException | None = None) -> None:
        self.result = result
        self.error = error
        self.calls: list[dict[str, Any]] = []
        self.started = asyncio.Event()
        self.release: asyncio.Event | None = None
        self.cancelled = False

    @property
    def last_kwargs(self) -> dict[str, Any]:
        return self.calls[-1]

    async def __call__(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        self.started.set()
        if self.release is not None:
            try:
                await self.release.wait()
            except asyncio.CancelledError:
                self.cancelled = True
                raise
        if self.error is not None:
            raise self.error
        return self.result


class FakeOpenAIClient:
    """Stands in for ``openai.AsyncOpenAI``: ``client.chat.completions.create``."""

    def __init__(self, result: Any = None, *, error: BaseException | None = None) -> None:
        self.create = _Recorder(result, error=error)
        self.chat = ns(completions=ns(create=self.create))
        self.closed = False

    async def close(self) -> None:
        self.closed = True


class FakeAnthropicClient:
    """Stands in for ``anthropic.AsyncAnthropic``: ``client.messages.create``."""

    def __init__(self, result: Any = None, *, error: BaseException | None = None) -> None:
        self.create = _Recorder(result, error=error)
        self.messages = ns(create=self.create)
        self.closed = False

    async def close(self) -> None:
        self.closed = True


class FakeGenaiClient:
    """Stands in for ``google.genai.Client``: ``client.aio.models.generate_content[_stream]``."""

    def __init__(
        self,
        result: Any = None,
        *,
        stream: Any = None,
        error: BaseException | None = None,
    ) -> None:
        self.generate_content = _Recorder(result, error=error)
        self.generate_content_stream = _Recorder(stream, error=error)
        self.aio = ns(
            models=ns(
                generate_content=self.generate_content,
                generate_content_stream=self.generate_content_stream,
            )
        )


def factory_for(client: Any) -> Any:
    """Return a client_factory that hands out *client* and records the api keys."""
    keys: list[str] = []

    def factory(api_key: str) -> Any:
        keys.append(api_key)
        return client

    factory.keys = keys  # type: ignore[attr-defined]
    return factory
