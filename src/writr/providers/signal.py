"""Caller-driven cancellation for in-flight provider calls.

An `AbortSignal` is handed to `complete`/`stream`; aborting it cancels the
underlying SDK call and surfaces `RequestAbortedError` instead of a partial
result.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import TYPE_CHECKING, Any, TypeVar

from writr.errors import RequestAbortedError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable

T = TypeVar("T")


class AbortSignal:
    """One-shot abort flag that coroutines can await."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str | None = None

    @property
    def aborted(self) -> bool:
        return self._event.is_set()

    def abort(self, reason: str | None = None) -> None:
        """Abort; later calls keep the first reason."""
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    async def wait(self) -> None:
        await self._event.wait()


def _aborted_error(signal: AbortSignal, provider: str | None) -> RequestAbortedError:
    detail = f": {signal.reason}" if signal.reason else ""
    return RequestAbortedError(
        f"Request aborted{detail}",
        retryable=False,
        provider=provider,
        phase="abort",
    )


def _discard(awaitable: Awaitable[Any]) -> None:
    if inspect.iscoroutine(awaitable):
        awaitable.close()


async def call_with_signal(
    awaitable: Awaitable[T],
    signal: AbortSignal | None,
    *,
    provider: str | None = None,
) -> T:
    """Await *awaitable*, cancelling it if *signal* fires first."""
    if signal is None:
        return await awaitable
    if signal.aborted:
        _discard(awaitable)
        raise _aborted_error(signal, provider)

    task = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(signal.wait())
    try:
        done, _ = await asyncio.wait(
            {task, waiter}, return_when=asyncio.FIRST_COMPLETED
        )
    except asyncio.CancelledError:
        task.cancel()
        waiter.cancel()
        raise

    if task in done:
        waiter.cancel()
        return task.result()

    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    raise _aborted_error(signal, provider)


async def _next_item(iterator: AsyncIterator[T]) -> tuple[bool, T | None]:
    try:
        return True, await iterator.__anext__()
    except StopAsyncIteration:
        return False, None


async def _close_iterator(iterator: Any) -> None:
    closer = getattr(iterator, "aclose", None) or getattr(iterator, "close", None)
    if closer is None:
        return
    result = closer()
    if inspect.isawaitable(result):
        await result


async def iterate_with_signal(
    stream: AsyncIterator[T],
    signal: AbortSignal | None,
    *,
    provider: str | None = None,
) -> AsyncIterator[T]:
    """Re-yield *stream*, stopping with RequestAbortedError on abort."""
    iterator = stream.__aiter__()
    try:
        while True:
            has_item, item = await call_with_signal(
                _next_item(iterator), signal, provider=provider
            )
            if not has_item:
                return
            yield item  # type: ignore[misc]
    finally:
        await _close_iterator(iterator)
