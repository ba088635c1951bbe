"""Deadline context shared by every attempt of one race.

A ``DeadlineContext`` is a cancellation signal with an absolute expiry on the
running loop's clock. It ends exactly once, either when the deadline passes
(``DeadlineExceeded``) or when its owner releases it (``ContextCancelled``).
Attempts never get forcibly stopped from the outside; they observe the signal
at their own checkpoints through ``guard``.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Optional, TypeVar

from ..duration import format_duration
from ..errors import ContextCancelled, ContextDone, DeadlineExceeded

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DeadlineContext:
    def __init__(self, timeout: float) -> None:
        self._loop = asyncio.get_running_loop()
        self.timeout = timeout
        self.deadline = self._loop.time() + timeout
        self._done = asyncio.Event()
        self._error: Optional[ContextDone] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        if timeout <= 0:
            # Already expired at the first check.
            self._finish(DeadlineExceeded(self._expiry_message()))
        else:
            self._timer = self._loop.call_later(timeout, self._expire)

    def __repr__(self) -> str:
        state = type(self._error).__name__ if self._error else "active"
        return f"<DeadlineContext timeout={format_duration(self.timeout)} {state}>"

    @property
    def done(self) -> bool:
        return self._done.is_set()

    @property
    def expired(self) -> bool:
        return isinstance(self._error, DeadlineExceeded)

    @property
    def error(self) -> Optional[ContextDone]:
        """A fresh instance of the error that ended the context, or None while active."""
        if self._error is None:
            return None
        return type(self._error)(str(self._error))

    def remaining(self) -> float:
        if self.done:
            return 0.0
        return max(0.0, self.deadline - self._loop.time())

    async def wait(self) -> None:
        await self._done.wait()

    def cancel(self) -> None:
        """Release the context; a no-op once it has already ended."""
        self._finish(ContextCancelled())

    async def guard(self, aw: Awaitable[T]) -> T:
        """Await ``aw`` unless the context ends first.

        When the context wins, ``aw`` is cancelled and the context's error is
        raised. A result that is already available wins over a context that
        ended in the same loop iteration.
        """
        if self.done:
            if inspect.iscoroutine(aw):
                aw.close()
            elif isinstance(aw, asyncio.Future):
                aw.cancel()
            raise self.error

        work = asyncio.ensure_future(aw)
        signal = asyncio.ensure_future(self._done.wait())
        try:
            await asyncio.wait({work, signal}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            signal.cancel()
            if not work.done():
                work.cancel()
        if work.done() and not work.cancelled():
            return work.result()
        raise self.error

    def _expire(self) -> None:
        self._timer = None
        logger.debug("Deadline of %s reached", format_duration(self.timeout))
        self._finish(DeadlineExceeded(self._expiry_message()))

    def _expiry_message(self) -> str:
        return f"context deadline exceeded ({format_duration(self.timeout)})"

    def _finish(self, error: ContextDone) -> None:
        if self._error is not None:
            return
        self._error = error
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._done.set()


@asynccontextmanager
async def deadline_scope(timeout: float) -> AsyncIterator[DeadlineContext]:
    """Open a deadline context and release it when the block exits."""
    ctx = DeadlineContext(timeout)
    try:
        yield ctx
    finally:
        ctx.cancel()
