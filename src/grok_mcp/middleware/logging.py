"""Logging middleware for tool calls."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pydantic import BaseModel

from ..foundation.errors import AppError
from ..observability import BoundLogger, get_logger
from .middleware import Context, Next, Params

if TYPE_CHECKING:
    from ..tools import GrokTool, ToolResponse


@dataclass(slots=True)
class LoggingMiddleware:
    """Log each call with timing and outcome.

    Recognized failures (bad input, auth, upstream) log at WARNING without a
    traceback; anything else logs at ERROR with one. Duration is stored in
    context as 'duration_ms'.
    """

    log: BoundLogger = field(default_factory=lambda: get_logger("grok_mcp.pipeline"))

    async def __call__(
        self,
        tool: GrokTool[BaseModel],
        params: Params,
        ctx: Context,
        next: Next,
    ) -> ToolResponse:
        log = self.log.bind(tool=tool.metadata.name)
        start = time.perf_counter()
        log.debug("starting", stage=ctx.stage)

        try:
            response = await next(tool, params, ctx)
        except AppError as e:
            ctx["duration_ms"] = duration_ms = (time.perf_counter() - start) * 1000
            log.warning("failed", stage=ctx.stage, code=str(e.code), status=e.status_code,
                        error=e.message, duration_ms=round(duration_ms, 1))
            raise
        except Exception as e:
            ctx["duration_ms"] = duration_ms = (time.perf_counter() - start) * 1000
            log.exception("crashed", stage=ctx.stage, error=f"{type(e).__name__}: {e}",
                          duration_ms=round(duration_ms, 1))
            raise

        ctx["duration_ms"] = duration_ms = (time.perf_counter() - start) * 1000
        log.info("ok", duration_ms=round(duration_ms, 1))
        return response
