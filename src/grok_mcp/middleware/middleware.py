"""Core middleware types and chain composition.

Middleware follows continuation-passing style: each middleware receives
the tool, params, context, and a `next` function to call downstream.
Params arrive as the raw argument dict and become the tool's validated
model once `ValidationMiddleware` has run.
"""

from __future__ import annotations

from collections.abc import Coroutine, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Literal, Protocol, runtime_checkable

from pydantic import BaseModel

if TYPE_CHECKING:
    from ..tools import GrokTool, ToolResponse

Params = BaseModel | dict[str, object]
Stage = Literal["received", "authenticating", "sanitizing", "validating", "dispatching", "responding", "failed"]


@dataclass(slots=True)
class Context:
    """Request-scoped state shared along the middleware chain.

    Well-known keys:
    - stage: current pipeline Stage
    - auth_token: credential presented by the caller (or None)
    - duration_ms: set by LoggingMiddleware

    Example:
        >>> ctx = Context()
        >>> ctx["request_id"] = "abc123"
        >>> ctx.get("request_id")
        'abc123'
    """

    data: dict[str, object] = field(default_factory=lambda: {"stage": "received"})

    def __getitem__(self, key: str) -> object:
        return self.data[key]

    def __setitem__(self, key: str, value: object) -> None:
        self.data[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self.data

    def get(self, key: str, default: object = None) -> object:
        return self.data.get(key, default)

    @property
    def stage(self) -> Stage:
        return self.data["stage"]  # type: ignore[return-value]

    @stage.setter
    def stage(self, value: Stage) -> None:
        self.data["stage"] = value


# Type alias for the continuation function
Next = Callable[["GrokTool[BaseModel]", Params, Context], "Coroutine[Any, Any, ToolResponse]"]


@runtime_checkable
class Middleware(Protocol):
    """Protocol for tool middleware.

    Example:
        >>> class TimingMiddleware:
        ...     async def __call__(self, tool, params, ctx, next):
        ...         start = time.perf_counter()
        ...         response = await next(tool, params, ctx)
        ...         ctx["duration"] = time.perf_counter() - start
        ...         return response
    """

    async def __call__(
        self,
        tool: GrokTool[BaseModel],
        params: Params,
        ctx: Context,
        next: Next,
    ) -> ToolResponse: ...


async def dispatch(tool: GrokTool[BaseModel], params: Params, ctx: Context) -> ToolResponse:
    """Innermost step: run the tool (validating first if nothing upstream did)."""
    model = params if isinstance(params, BaseModel) else tool.validate(params)
    ctx.stage = "dispatching"
    return await tool.run(model)


def compose(middleware: Sequence[Middleware]) -> Next:
    """Compose middleware into a single execution function.

    Args:
        middleware: Ordered list of middleware (first = outermost)

    Returns:
        Composed async function: (tool, params, ctx) -> ToolResponse
    """
    chain: Next = dispatch
    for mw in reversed(middleware):
        def make_wrapper(m: Middleware, nxt: Next) -> Next:
            async def wrapped(tool: GrokTool[BaseModel], params: Params, ctx: Context) -> ToolResponse:
                return await m(tool, params, ctx, nxt)
            return wrapped
        chain = make_wrapper(mw, chain)
    return chain
