"""Request pipeline: one tool call in, one response envelope out.

Every call walks received -> authenticating -> sanitizing -> validating ->
dispatching -> responding. A failure at any stage moves the call to
`failed` and it leaves as an `Error: ...` response; the pipeline itself
never raises, so the channel stays open under sustained errors.

Example:
    >>> pipeline = RequestPipeline(registry, metrics=backend, secret=None)
    >>> response = await pipeline.handle(ToolRequest("grok_ask", {"question": "hi"}))
    >>> response.first_text
    'Hello! ...'
"""

from __future__ import annotations

import itertools
import time
from collections.abc import Sequence
from dataclasses import dataclass, field

from pydantic import SecretStr

from .foundation.errors import AppError, public_message
from .middleware import (
    AuthMiddleware,
    Context,
    LoggingMiddleware,
    MetricsMiddleware,
    Middleware,
    Next,
    SanitizeMiddleware,
    ValidationMiddleware,
    compose,
)
from .middleware.metrics import REQUEST_LATENCY_MS, REQUESTS_TOTAL
from .observability import MetricsBackend, get_logger, log_context
from .tools import ToolRegistry, ToolResponse

log = get_logger("grok_mcp.pipeline")

_request_ids = itertools.count(1)


@dataclass(slots=True, frozen=True)
class ToolRequest:
    """A decoded tool call: name, raw arguments, optional credential."""

    name: str
    arguments: dict[str, object] = field(default_factory=dict)
    auth: str | None = None


def default_middleware(metrics: MetricsBackend, secret: SecretStr | None) -> list[Middleware]:
    """Outermost first: metrics, logging, auth, sanitize, validation."""
    return [
        MetricsMiddleware(backend=metrics),
        LoggingMiddleware(),
        AuthMiddleware(secret=secret),
        SanitizeMiddleware(),
        ValidationMiddleware(),
    ]


class RequestPipeline:
    """Runs tool calls through the middleware chain and maps errors to envelopes.

    Args:
        registry: Tools available for dispatch
        metrics: Backend receiving request/error/latency metrics
        secret: Shared secret; None disables authentication
        middleware: Override the default chain (outermost first)
    """

    __slots__ = ("registry", "metrics", "_chain")

    def __init__(
        self,
        registry: ToolRegistry,
        *,
        metrics: MetricsBackend,
        secret: SecretStr | None = None,
        middleware: Sequence[Middleware] | None = None,
    ) -> None:
        self.registry = registry
        self.metrics = metrics
        self._chain: Next = compose(middleware if middleware is not None else default_middleware(metrics, secret))

    async def handle(self, request: ToolRequest) -> ToolResponse:
        start = time.perf_counter()
        tool = self.registry.get(request.name)
        if tool is None:
            tags = {"tool": "unknown"}
            self.metrics.increment(f"grok_mcp.{REQUESTS_TOTAL}", tags=tags)
            self.metrics.timing(f"grok_mcp.{REQUEST_LATENCY_MS}", (time.perf_counter() - start) * 1000, tags=tags)
            log.warning("unknown tool", tool=request.name)
            return ToolResponse.error(f"Unknown tool: {request.name}")

        ctx = Context()
        ctx["auth_token"] = request.auth
        with log_context(request_id=next(_request_ids)):
            try:
                response = await self._chain(tool, dict(request.arguments), ctx)
            except Exception as e:  # noqa: BLE001 - every failure becomes an error envelope
                ctx["failed_at"] = ctx.stage
                ctx.stage = "failed"
                if not isinstance(e, AppError):
                    log.error("internal error hidden from caller", tool=request.name, failed_at=ctx["failed_at"])
                return ToolResponse.error(public_message(e))
        ctx.stage = "responding"
        return response
