import asyncio
import sys
from pathlib import Path

import pytest

# Ensure package path for local src
ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "fastest_request" / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from fastest_request.errors import ContextCancelled, ContextDone, DeadlineExceeded
from fastest_request.execution import DeadlineContext, deadline_scope


def run(coro):
    return asyncio.run(coro)


def test_context_expires_after_timeout():
    async def scenario():
        ctx = DeadlineContext(0.02)
        assert not ctx.done
        assert ctx.error is None
        assert 0 < ctx.remaining() <= 0.02
        await ctx.wait()
        return ctx

    ctx = run(scenario())
    assert ctx.done and ctx.expired
    assert isinstance(ctx.error, DeadlineExceeded)
    assert isinstance(ctx.error, TimeoutError)
    assert ctx.remaining() == 0.0


def test_non_positive_timeout_is_expired_immediately():
    async def scenario():
        return DeadlineContext(0), DeadlineContext(-5400.0)

    for ctx in run(scenario()):
        assert ctx.done and ctx.expired


def test_cancel_is_not_an_expiry_and_only_happens_once():
    async def scenario():
        ctx = DeadlineContext(0.01)
        ctx.cancel()
        await asyncio.sleep(0.03)
        return ctx

    ctx = run(scenario())
    assert ctx.done
    assert not ctx.expired
    assert isinstance(ctx.error, ContextCancelled)


def test_error_is_a_fresh_instance_each_time():
    async def scenario():
        ctx = DeadlineContext(-1)
        return ctx.error, ctx.error

    first, second = run(scenario())
    assert first is not second
    assert str(first) == str(second)


def test_guard_returns_the_result_when_work_finishes_first():
    async def work():
        await asyncio.sleep(0.01)
        return 42

    async def scenario():
        ctx = DeadlineContext(1.0)
        value = await ctx.guard(work())
        ctx.cancel()
        return value

    assert run(scenario()) == 42


def test_guard_propagates_work_exceptions():
    async def work():
        raise KeyError("boom")

    async def scenario():
        ctx = DeadlineContext(1.0)
        try:
            await ctx.guard(work())
        finally:
            ctx.cancel()

    with pytest.raises(KeyError):
        run(scenario())


def test_guard_abandons_work_when_deadline_fires():
    state = {}

    async def work():
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            state["cancelled"] = True
            raise

    async def scenario():
        ctx = DeadlineContext(0.02)
        with pytest.raises(DeadlineExceeded):
            await ctx.guard(work())
        await asyncio.sleep(0.01)

    run(scenario())
    assert state == {"cancelled": True}


def test_guard_on_finished_context_never_starts_the_work():
    started = []

    async def work():
        started.append(True)

    async def scenario():
        ctx = DeadlineContext(1.0)
        ctx.cancel()
        with pytest.raises(ContextDone):
            await ctx.guard(work())
        await asyncio.sleep(0.01)

    run(scenario())
    assert started == []


def test_deadline_scope_releases_on_exit():
    async def scenario():
        async with deadline_scope(10.0) as ctx:
            assert not ctx.done
        return ctx

    ctx = run(scenario())
    assert ctx.done
    assert isinstance(ctx.error, ContextCancelled)


def test_deadline_scope_keeps_expiry_cause():
    async def scenario():
        async with deadline_scope(0.01) as ctx:
            await ctx.wait()
        return ctx

    ctx = run(scenario())
    assert ctx.expired
