"""Concurrent dispatch of one GET request per target.

Each attempt runs as its own asyncio task and reports exactly one ``Outcome``
on a shared outcome queue, unless the deadline context ends first, in which
case the outcome is dropped. Attempt errors never propagate as exceptions.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, TypeVar

import httpx

from ..errors import AttemptError, BodyReadError, ContextDone, TransportError
from .context import DeadlineContext

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Strong references to running attempts; the race that started them does not await them.
_inflight: Set[asyncio.Task] = set()


@dataclass(frozen=True)
class Response:
    """Body of the winning endpoint, read in full."""
    url: str
    data: str
    status_code: int = field(default=0, compare=False)

    def as_dict(self) -> Dict[str, str]:
        return {"url": self.url, "data": self.data}

    def to_json(self, **kwargs: Any) -> str:
        return json.dumps(self.as_dict(), **kwargs)


@dataclass(frozen=True)
class Outcome:
    """Result of one attempt: a response or an error, never both."""
    target: str
    response: Optional[Response] = None
    error: Optional[AttemptError] = None

    @property
    def success(self) -> bool:
        return self.response is not None

    @classmethod
    def succeeded(cls, target: str, response: Response) -> "Outcome":
        return cls(target=target, response=response)

    @classmethod
    def failed(cls, target: str, error: AttemptError) -> "Outcome":
        return cls(target=target, error=error)


async def send_or_abandon(ctx: DeadlineContext, queue: "asyncio.Queue[T]", item: T) -> bool:
    """Enqueue ``item`` unless ``ctx`` ends first. Returns whether it was delivered."""
    if ctx.done:
        return False
    if not queue.full():
        queue.put_nowait(item)
        return True
    try:
        await ctx.guard(queue.put(item))
    except ContextDone:
        return False
    return True


class OutcomeStream:
    """Inbound side of a dispatch: outcomes in completion order.

    The reader decides when to stop and then calls ``close``, which discards
    whatever is still buffered. ``dropped`` counts attempts whose outcome was
    discarded, either because the context had already ended or because nobody
    was left to read it.
    """

    def __init__(self, ctx: DeadlineContext, targets: Sequence[str]) -> None:
        self.ctx = ctx
        self.targets = tuple(targets)
        self.tasks: List[asyncio.Task] = []
        self.dropped = 0
        self.closed = False
        # Capacity one: a producer parks on put until the reader takes the
        # previous outcome or the context ends.
        self._queue: "asyncio.Queue[Outcome]" = asyncio.Queue(maxsize=1)

    async def get(self) -> Outcome:
        return await self._queue.get()

    async def emit(self, outcome: Outcome) -> bool:
        if self.closed or self.ctx.done or not await send_or_abandon(self.ctx, self._queue, outcome):
            self.drop(outcome.target)
            return False
        if self.closed:
            self._drain()
            return False
        return True

    def drop(self, target: str) -> None:
        self.dropped += 1
        logger.debug("Dropping outcome from %s: %r", target, self.ctx)

    def close(self) -> None:
        """Stop reading. Buffered and later outcomes are dropped."""
        self.closed = True
        self._drain()

    def _drain(self) -> None:
        while not self._queue.empty():
            self.drop(self._queue.get_nowait().target)


class Dispatcher:
    """Launches one attempt per target against a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        headers: Optional[Mapping[str, str]] = None,
        fail_on_http_error: bool = False,
    ) -> None:
        self._client = client
        self._headers = dict(headers or {})
        self._fail_on_http_error = fail_on_http_error

    def dispatch(self, ctx: DeadlineContext, targets: Sequence[str]) -> OutcomeStream:
        if not targets:
            raise ValueError("dispatch requires at least one target")
        stream = OutcomeStream(ctx, targets)
        for target in stream.targets:
            task = asyncio.create_task(self._attempt(ctx, stream, target))
            _inflight.add(task)
            task.add_done_callback(_inflight.discard)
            stream.tasks.append(task)
        return stream

    async def _attempt(self, ctx: DeadlineContext, stream: OutcomeStream, target: str) -> None:
        try:
            outcome = await ctx.guard(self._fetch(ctx, target))
        except ContextDone:
            stream.drop(target)
            return
        await stream.emit(outcome)

    async def _fetch(self, ctx: DeadlineContext, target: str) -> Outcome:
        timeout = httpx.Timeout(ctx.remaining())
        try:
            async with self._client.stream("GET", target, headers=self._headers, timeout=timeout) as response:
                try:
                    await response.aread()
                    body = response.text
                except Exception as exc:
                    return Outcome.failed(target, BodyReadError(target, exc))
                if self._fail_on_http_error and response.status_code >= 400:
                    return Outcome.failed(
                        target,
                        TransportError(target, message=f"unexpected status {response.status_code}"),
                    )
                return Outcome.succeeded(
                    target,
                    Response(url=target, data=body, status_code=response.status_code),
                )
        except Exception as exc:
            return Outcome.failed(target, TransportError(target, exc))
