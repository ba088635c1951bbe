"""Race coordinator: first success wins, all failures are combined.

The coordinator waits on exactly two things, the next outcome and the deadline.
Returning from the race (for any reason) releases the deadline context, which
is the only signal the still-running attempts get; they are never awaited.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import httpx

from ..config import RaceConfig
from ..duration import format_duration
from ..errors import AttemptError, CombinedFailure
from ..targets import build_targets
from .context import deadline_scope
from .dispatcher import Dispatcher, Outcome, Response

logger = logging.getLogger(__name__)


@dataclass
class RaceState:
    """Bookkeeping for a single race; discarded when the race returns."""
    expected: int
    received: int = 0
    errors: List[AttemptError] = field(default_factory=list)

    def record(self, outcome: Outcome) -> None:
        self.received += 1
        if outcome.error is not None:
            self.errors.append(outcome.error)

    @property
    def exhausted(self) -> bool:
        return self.received >= self.expected


async def race_targets(
    targets: Sequence[str],
    timeout: float,
    client: httpx.AsyncClient,
    *,
    headers: Optional[dict] = None,
    fail_on_http_error: bool = False,
) -> Response:
    """Race ``targets`` and return the first successful response.

    Raises:
        DeadlineExceeded: ``timeout`` elapsed before any target succeeded.
        CombinedFailure: every target failed; ``errors`` keeps arrival order.
    """
    targets = list(targets)
    if not targets:
        raise ValueError("race requires at least one target")

    dispatcher = Dispatcher(client, headers=headers, fail_on_http_error=fail_on_http_error)
    started = time.monotonic()
    async with deadline_scope(timeout) as ctx:
        stream = dispatcher.dispatch(ctx, targets)
        state = RaceState(expected=len(targets))
        try:
            while True:
                outcome = await ctx.guard(stream.get())
                if ctx.expired:
                    # The deadline wins over an outcome that arrived in the same tick.
                    stream.drop(outcome.target)
                    raise ctx.error
                if outcome.success:
                    logger.info(
                        "Race won by %s in %.1fms (%d of %d failed first)",
                        outcome.target, (time.monotonic() - started) * 1000.0, state.received, state.expected,
                    )
                    return outcome.response
                logger.warning("Attempt failed: %s", outcome.error)
                state.record(outcome)
                if state.exhausted:
                    raise CombinedFailure(state.errors)
        finally:
            stream.close()


async def race(
    identifier: str,
    timeout: float,
    *,
    client: Optional[httpx.AsyncClient] = None,
    config: Optional[RaceConfig] = None,
) -> Response:
    """Query every configured provider for ``identifier`` and return the fastest answer.

    The identifier is validated before anything is dispatched. Without a
    ``client`` a private one is opened for this race and closed afterwards.
    """
    config = config or RaceConfig()
    targets = build_targets(identifier, config.provider_urls)
    logger.debug("Racing %d targets with timeout %s", len(targets), format_duration(timeout))
    options = dict(headers=config.headers(), fail_on_http_error=config.fail_on_http_error)
    if client is not None:
        return await race_targets(targets, timeout, client, **options)
    async with httpx.AsyncClient(follow_redirects=True) as owned:
        return await race_targets(targets, timeout, owned, **options)


def race_sync(
    identifier: str,
    timeout: float,
    *,
    config: Optional[RaceConfig] = None,
) -> Response:
    """Blocking wrapper around ``race`` for callers without an event loop."""
    return asyncio.run(race(identifier, timeout, config=config))
