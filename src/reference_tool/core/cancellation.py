"""
Cooperative cancellation for long-running network builds.

A single CancelToken is shared between the caller (e.g. a SIGINT handler)
and every blocking wait of a build: pacing sleeps, retry delays and the
in-flight HTTP attempt.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

from .errors import OperationCancelled

T = TypeVar("T")


class CancelToken:
    """One-shot cancellation signal backed by an asyncio.Event."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        """Fire the signal. Safe to call more than once."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled("Operation cancelled")

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """
        Await `awaitable` unless the token fires first.

        When the token fires, the pending awaitable is cancelled and
        OperationCancelled is raised.
        """
        if self._event.is_set():
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise OperationCancelled("Operation cancelled")

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
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
        # Let the cancelled attempt unwind before reporting
        await asyncio.gather(task, return_exceptions=True)
        raise OperationCancelled("Operation cancelled")
