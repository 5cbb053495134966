"""Shared-secret authentication gate."""

from __future__ import annotations

import hmac
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pydantic import BaseModel, SecretStr

from ..foundation.errors import AuthError
from .middleware import Context, Next, Params

if TYPE_CHECKING:
    from ..tools import GrokTool, ToolResponse

UNAUTHORIZED = "Unauthorized: invalid or missing auth token"


def token_matches(token: str | None, secret: str) -> bool:
    """Constant-time comparison; a length mismatch fails before comparing."""
    if not token:
        return False
    presented, expected = token.encode(), secret.encode()
    if len(presented) != len(expected):
        return False
    return hmac.compare_digest(presented, expected)


@dataclass(slots=True)
class AuthMiddleware:
    """Reject calls whose `ctx["auth_token"]` does not equal the shared secret.

    With no secret configured every call passes.
    """

    secret: SecretStr | None = field(default=None, repr=False)

    async def __call__(
        self,
        tool: GrokTool[BaseModel],
        params: Params,
        ctx: Context,
        next: Next,
    ) -> ToolResponse:
        if self.secret is not None:
            ctx.stage = "authenticating"
            token = ctx.get("auth_token")
            if not token_matches(token if isinstance(token, str) else None, self.secret.get_secret_value()):
                raise AuthError(UNAUTHORIZED)
        return await next(tool, params, ctx)
