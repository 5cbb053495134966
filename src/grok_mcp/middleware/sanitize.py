"""Input sanitization applied before schema validation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import BaseModel

from .middleware import Context, Next, Params

if TYPE_CHECKING:
    from ..tools import GrokTool, ToolResponse

_STRIP = str.maketrans("", "", "<>\"'`")


def _unsafe_key(key: object) -> bool:
    return isinstance(key, str) and (key.startswith("$") or "__proto__" in key)


def sanitize(value: object) -> object:
    """Recursively strip markup/quote characters from strings.

    Mapping keys beginning with "$" or containing "__proto__" are dropped.
    Non-string scalars pass through unchanged.

    >>> sanitize({"question": "<script>'", "$where": "x"})
    {'question': 'script'}
    """
    if isinstance(value, str):
        return value.translate(_STRIP)
    if isinstance(value, dict):
        return {k: sanitize(v) for k, v in value.items() if not _unsafe_key(k)}
    if isinstance(value, (list, tuple)):
        return [sanitize(v) for v in value]
    return value


@dataclass(slots=True)
class SanitizeMiddleware:
    async def __call__(
        self,
        tool: GrokTool[BaseModel],
        params: Params,
        ctx: Context,
        next: Next,
    ) -> ToolResponse:
        ctx.stage = "sanitizing"
        if isinstance(params, dict):
            params = sanitize(params)  # type: ignore[assignment]
        return await next(tool, params, ctx)
