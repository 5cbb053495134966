"""Outbound call limiter: bounded concurrency plus minimum start spacing.

Every upstream request runs inside a limiter slot. A slot is granted when
fewer than `max_concurrent` calls are in flight AND at least `min_interval`
seconds have passed since the previous slot was granted. Waiters are served
in arrival order.

Example:
    >>> limiter = Limiter(max_concurrent=2, min_interval=0.5)
    >>> async with limiter.slot():
    ...     response = await http.post(...)
    >>> # or
    >>> response = await limiter.schedule(http.post, "/chat/completions", json=body)
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable
from contextlib import asynccontextmanager
from typing import Callable, ParamSpec, TypeVar

from ..foundation.errors import RateLimitError

P = ParamSpec("P")
T = TypeVar("T")


class Limiter:
    """Concurrency cap with a spacing gate and an optional waiting-queue bound.

    Args:
        max_concurrent: Max slots held at once
        min_interval: Seconds between consecutive slot grants
        max_queue: Max callers waiting for a slot; beyond it RateLimitError
            is raised immediately. None or 0 means unbounded.
    """

    __slots__ = ("max_concurrent", "min_interval", "max_queue", "_sem", "_gate",
                 "_next_start", "_waiting", "_active", "_peak", "_granted")

    def __init__(self, max_concurrent: int = 2, min_interval: float = 0.5, max_queue: int | None = None) -> None:
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be >= 1")
        if min_interval < 0:
            raise ValueError("min_interval must be >= 0")
        self.max_concurrent = max_concurrent
        self.min_interval = min_interval
        self.max_queue = max_queue or None
        self._sem = asyncio.Semaphore(max_concurrent)
        self._gate = asyncio.Lock()
        self._next_start = 0.0
        self._waiting = 0
        self._active = 0
        self._peak = 0
        self._granted = 0

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        """Hold one slot for the duration of the block."""
        if self.max_queue is not None and self._waiting >= self.max_queue:
            raise RateLimitError(
                f"Upstream queue full: {self._waiting} calls waiting (limit {self.max_queue})"
            )
        self._waiting += 1
        try:
            await self._sem.acquire()
            try:
                await self._space()
            except BaseException:
                self._sem.release()
                raise
        finally:
            self._waiting -= 1

        self._active += 1
        self._granted += 1
        self._peak = max(self._peak, self._active)
        try:
            yield
        finally:
            self._active -= 1
            self._sem.release()

    async def schedule(self, fn: Callable[P, Awaitable[T]], *args: P.args, **kwargs: P.kwargs) -> T:
        """Run `fn(*args, **kwargs)` inside a slot."""
        async with self.slot():
            return await fn(*args, **kwargs)

    async def _space(self) -> None:
        async with self._gate:
            loop = asyncio.get_running_loop()
            delay = self._next_start - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)
            self._next_start = loop.time() + self.min_interval

    @property
    def active(self) -> int:
        return self._active

    @property
    def waiting(self) -> int:
        return self._waiting

    @property
    def peak(self) -> int:
        """Highest number of slots ever held at once."""
        return self._peak

    def stats(self) -> dict[str, object]:
        return {
            "active": self._active,
            "waiting": self._waiting,
            "peak": self._peak,
            "granted": self._granted,
            "max_concurrent": self.max_concurrent,
            "min_interval": self.min_interval,
            "max_queue": self.max_queue,
        }
