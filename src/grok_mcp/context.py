"""Process-wide state, built once at startup and passed explicitly.

Nothing in the package keeps module-level caches or counters; the cache,
limiter and metrics live here, so each test can build a fresh context.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from .cache import ResponseCache
from .client import GrokClient
from .foundation.config import GrokSettings
from .observability import MemoryMetricsBackend
from .pipeline import RequestPipeline
from .runtime import Limiter
from .tools import ToolRegistry, default_registry


@dataclass(slots=True)
class ServerContext:
    settings: GrokSettings
    client: GrokClient
    metrics: MemoryMetricsBackend
    registry: ToolRegistry
    pipeline: RequestPipeline

    async def aclose(self) -> None:
        await self.client.aclose()


def build_context(settings: GrokSettings, *, transport: httpx.AsyncBaseTransport | None = None) -> ServerContext:
    """Wire settings into client, tools and pipeline.

    Args:
        settings: Resolved settings
        transport: httpx transport override for the upstream client
    """
    cache: ResponseCache[object] = ResponseCache(ttl=settings.cache.ttl, max_entries=settings.cache.max_size)
    limiter = Limiter(
        max_concurrent=settings.limiter.max_concurrent,
        min_interval=settings.limiter.min_interval,
        max_queue=settings.limiter.max_queue,
    )
    client = GrokClient(
        settings.upstream_config(),
        cache=cache,
        limiter=limiter,
        search_mode=settings.search_mode,
        transport=transport,
    )
    metrics = MemoryMetricsBackend()
    registry = default_registry(client, metrics)
    pipeline = RequestPipeline(registry, metrics=metrics, secret=settings.shared_secret)
    return ServerContext(settings, client, metrics, registry, pipeline)
