"""Tests for the outbound limiter."""

from __future__ import annotations

import asyncio

import pytest

from grok_mcp.foundation.errors import ExternalServiceError, RateLimitError
from grok_mcp.runtime import Limiter


@pytest.mark.asyncio
async def test_never_more_than_max_concurrent() -> None:
    limiter = Limiter(max_concurrent=2, min_interval=0.0)
    running = 0
    seen: list[int] = []

    async def call() -> None:
        nonlocal running
        async with limiter.slot():
            running += 1
            seen.append(running)
            await asyncio.sleep(0.02)
            running -= 1

    await asyncio.gather(*(call() for _ in range(6)))
    assert max(seen) == 2
    assert limiter.peak == 2
    assert limiter.active == 0


@pytest.mark.asyncio
async def test_default_spacing_between_starts() -> None:
    """Three simultaneous calls start at least 500ms apart."""
    limiter = Limiter()
    loop = asyncio.get_running_loop()
    starts: list[float] = []

    async def call() -> None:
        async with limiter.slot():
            starts.append(loop.time())

    await asyncio.gather(call(), call(), call())
    starts.sort()
    gaps = [b - a for a, b in zip(starts, starts[1:])]
    assert len(gaps) == 2
    assert all(gap >= 0.49 for gap in gaps)


@pytest.mark.asyncio
async def test_schedule_returns_result() -> None:
    limiter = Limiter(min_interval=0.0)

    async def double(x: int) -> int:
        return x * 2

    assert await limiter.schedule(double, 21) == 42
    assert limiter.stats()["granted"] == 1


@pytest.mark.asyncio
async def test_slot_released_on_error() -> None:
    limiter = Limiter(max_concurrent=1, min_interval=0.0)
    with pytest.raises(ValueError):
        async with limiter.slot():
            raise ValueError("boom")
    assert limiter.active == 0
    async with limiter.slot():
        assert limiter.active == 1


@pytest.mark.asyncio
async def test_queue_bound_rejects_excess_callers() -> None:
    limiter = Limiter(max_concurrent=1, min_interval=0.0, max_queue=1)
    release = asyncio.Event()

    async def hold() -> None:
        async with limiter.slot():
            await release.wait()

    first = asyncio.create_task(hold())
    await asyncio.sleep(0.01)
    second = asyncio.create_task(hold())
    await asyncio.sleep(0.01)
    assert limiter.active == 1 and limiter.waiting == 1

    with pytest.raises(RateLimitError) as exc:
        async with limiter.slot():
            pass
    assert exc.value.status_code == 429
    assert isinstance(exc.value, ExternalServiceError)

    release.set()
    await asyncio.gather(first, second)
    assert limiter.waiting == 0 and limiter.active == 0


def test_zero_queue_means_unbounded() -> None:
    assert Limiter(max_queue=0).max_queue is None
    assert Limiter(max_queue=5).max_queue == 5


def test_invalid_arguments() -> None:
    with pytest.raises(ValueError):
        Limiter(max_concurrent=0)
    with pytest.raises(ValueError):
        Limiter(min_interval=-1)
