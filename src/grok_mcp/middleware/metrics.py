"""Metrics middleware for tool calls."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pydantic import BaseModel

from ..observability import MemoryMetricsBackend, MetricsBackend
from .middleware import Context, Next, Params

if TYPE_CHECKING:
    from ..tools import GrokTool, ToolResponse

REQUESTS_TOTAL = "requests_total"
ERRORS_TOTAL = "errors_total"
REQUEST_LATENCY_MS = "request_latency_ms"


@dataclass(slots=True)
class MetricsMiddleware:
    """Count requests and failures, time every call.

    Emits (prefixed):
    - requests_total: Counter per tool
    - errors_total: Counter per tool, when anything downstream raises
    - request_latency_ms: Timing per tool, success or failure

    Args:
        backend: MetricsBackend implementation
        prefix: Metric name prefix
    """

    backend: MetricsBackend = field(default_factory=MemoryMetricsBackend)
    prefix: str = "grok_mcp"

    async def __call__(
        self,
        tool: GrokTool[BaseModel],
        params: Params,
        ctx: Context,
        next: Next,
    ) -> ToolResponse:
        tags = {"tool": tool.metadata.name}
        self.backend.increment(f"{self.prefix}.{REQUESTS_TOTAL}", tags=tags)
        start = time.perf_counter()
        try:
            return await next(tool, params, ctx)
        except Exception:
            self.backend.increment(f"{self.prefix}.{ERRORS_TOTAL}", tags=tags)
            raise
        finally:
            self.backend.timing(f"{self.prefix}.{REQUEST_LATENCY_MS}", (time.perf_counter() - start) * 1000, tags=tags)
