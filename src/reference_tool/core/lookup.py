"""
Resilient wrapper around the remote lookup client.

Adds request pacing, a per-attempt timeout and bounded retries of
transient failures. The wrapper owns its pacing state, so each network
build gets an independent rate limiter.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, Protocol, TypeVar

from .cancellation import CancelToken
from .errors import LookupErrorKind, PaperLookupError
from .models import LookupResult

logger = logging.getLogger("reference-tool")

T = TypeVar("T")


class LookupClient(Protocol):
    """Anything that can resolve a paper identifier to a LookupResult."""

    async def lookup(self, identifier: str) -> LookupResult: ...


class ResilientLookup:
    """
    Paced, retrying, cancellable lookups.

    Before attempt n (0-based) of a lookup the wrapper waits until at
    least `request_delay_ms * (n + 1)` has passed since the previous
    attempt completed, so the first attempt respects the plain delay and
    each retry backs off linearly.
    """

    def __init__(
        self,
        client: LookupClient,
        max_retries: int = 3,
        request_delay_ms: int = 100,
        timeout_seconds: float = 30,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the wrapper.

        Args:
            client: The underlying lookup client.
            max_retries: Retries allowed after the first transient failure.
            request_delay_ms: Minimum gap between consecutive attempts.
            timeout_seconds: Upper bound for a single attempt.
            clock: Monotonic time source (seconds).
            sleep: Async sleep used for pacing.
        """
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if request_delay_ms < 0:
            raise ValueError("request_delay_ms must be >= 0")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")

        self.client = client
        self.max_retries = max_retries
        self.request_delay = request_delay_ms / 1000
        self.timeout_seconds = timeout_seconds
        self._clock = clock
        self._sleep = sleep
        self._last_completed: Optional[float] = None
        self.attempt_count = 0

    async def _guard(self, awaitable: Awaitable[T], cancel_token: Optional[CancelToken]) -> T:
        if cancel_token is None:
            return await awaitable
        return await cancel_token.guard(awaitable)

    async def _pace(self, floor: float, cancel_token: Optional[CancelToken]) -> None:
        """Wait until `floor` seconds have passed since the last attempt."""
        if self._last_completed is None:
            return
        remaining = floor - (self._clock() - self._last_completed)
        if remaining > 0:
            await self._guard(self._sleep(remaining), cancel_token)

    async def _attempt(
        self,
        identifier: str,
        cancel_token: Optional[CancelToken],
    ) -> LookupResult:
        self.attempt_count += 1
        try:
            return await self._guard(
                asyncio.wait_for(self.client.lookup(identifier), timeout=self.timeout_seconds),
                cancel_token,
            )
        except asyncio.TimeoutError as e:
            raise PaperLookupError(
                LookupErrorKind.TRANSIENT,
                f"Lookup of {identifier} timed out after {self.timeout_seconds}s",
                cause=e,
            ) from e
        finally:
            self._last_completed = self._clock()

    async def lookup(
        self,
        identifier: str,
        cancel_token: Optional[CancelToken] = None,
    ) -> LookupResult:
        """
        Look up a paper, retrying transient failures.

        Raises:
            PaperLookupError: Non-transient failures immediately; a
                TRANSIENT error wrapping the last cause once retries are
                exhausted.
            OperationCancelled: If `cancel_token` fires.
        """
        attempts = self.max_retries + 1
        last_error: Optional[PaperLookupError] = None

        for attempt in range(attempts):
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
            await self._pace(self.request_delay * (attempt + 1), cancel_token)

            try:
                return await self._attempt(identifier, cancel_token)
            except PaperLookupError as e:
                if not e.retryable:
                    raise
                last_error = e
                if attempt + 1 < attempts:
                    logger.warning(
                        f"Transient failure for {identifier} "
                        f"(attempt {attempt + 1}/{attempts}): {e}"
                    )

        raise PaperLookupError(
            LookupErrorKind.TRANSIENT,
            f"Giving up on {identifier} after {attempts} attempts: {last_error}",
            cause=last_error,
        )
