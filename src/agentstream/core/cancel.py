"""Cooperative cancellation for sessions."""

import asyncio
from collections.abc import AsyncIterator, Awaitable, Coroutine
from typing import TypeVar

T = TypeVar("T")

_END = object()


class SessionCancelled(Exception):
    """Raised inside a session once its cancel token fires.

    Internal control flow only: the controller catches it and stops without
    invoking any callback.
    """


class CancelToken:
    """A signal the caller sets to abandon a running session."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise SessionCancelled()


async def run_cancellable(awaitable: Awaitable[T], token: CancelToken) -> T:
    """Await ``awaitable`` unless the token fires first.

    When the token wins, the pending work is cancelled and awaited before
    SessionCancelled is raised.
    """
    if token.cancelled:
        if isinstance(awaitable, Coroutine):
            awaitable.close()
        raise SessionCancelled()
    work = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(token.wait())
    try:
        done, _ = await asyncio.wait(
            {work, waiter}, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        waiter.cancel()
        if not work.done():
            work.cancel()
            await asyncio.gather(work, return_exceptions=True)
    if work in done:
        return work.result()
    raise SessionCancelled()


async def _next_or_end(stream: AsyncIterator[T]) -> T | object:
    try:
        return await anext(stream)
    except StopAsyncIteration:
        return _END


async def iterate_cancellable(
    stream: AsyncIterator[T], token: CancelToken
) -> AsyncIterator[T]:
    """Yield items from ``stream`` until it ends or the token fires."""
    while True:
        item = await run_cancellable(_next_or_end(stream), token)
        if item is _END:
            return
        yield item  # type: ignore[misc]
