"""Schema validation: raw arguments in, the tool's params model out."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import BaseModel

from .middleware import Context, Next, Params

if TYPE_CHECKING:
    from ..tools import GrokTool, ToolResponse


@dataclass(slots=True)
class ValidationMiddleware:
    """Convert the argument dict to `tool.params_schema`.

    Raises `ValidationError` (with per-field issues) before anything reaches
    the upstream. Already-validated models pass through.
    """

    async def __call__(
        self,
        tool: GrokTool[BaseModel],
        params: Params,
        ctx: Context,
        next: Next,
    ) -> ToolResponse:
        ctx.stage = "validating"
        if isinstance(params, dict):
            params = tool.validate(params)
        ctx["validated"] = True
        return await next(tool, params, ctx)
