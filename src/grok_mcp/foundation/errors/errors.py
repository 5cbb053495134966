"""Error kinds raised along the request pipeline and the upstream client.

Recognized kinds (validation, auth, external service) carry a user-safe
message that the pipeline surfaces verbatim. Anything else is treated as an
internal failure and rendered generically.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Self


class ErrorCode(StrEnum):
    """Machine-readable error classification."""
    INVALID_PARAMS = "INVALID_PARAMS"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    RATE_LIMITED = "RATE_LIMITED"
    TIMEOUT = "TIMEOUT"
    INTERNAL = "INTERNAL"


class AppError(Exception):
    """Base for errors whose message is safe to show to the caller.

    Attributes:
        message: Human-readable, single-line description
        status_code: HTTP-like status (4xx caller fault, 5xx upstream/internal)
        code: ErrorCode for programmatic handling
        context: Extra structured data (e.g. validation issues)
    """

    code: ErrorCode = ErrorCode.INTERNAL
    default_status: int = 500

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        context: dict[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code if status_code is not None else self.default_status
        self.context = context or {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, status_code={self.status_code})"


class ValidationError(AppError):
    """Bad or missing input. Raised before any upstream call."""

    code = ErrorCode.INVALID_PARAMS
    default_status = 400

    def __init__(self, message: str, issues: list[dict[str, str]] | None = None) -> None:
        super().__init__(message, context={"issues": issues or []})

    @property
    def issues(self) -> list[dict[str, str]]:
        return self.context["issues"]  # type: ignore[return-value]


class AuthError(AppError):
    """Failed shared-secret check."""

    code = ErrorCode.PERMISSION_DENIED
    default_status = 401


class ExternalServiceError(AppError):
    """Upstream call failed, was rejected, or timed out."""

    code = ErrorCode.EXTERNAL_SERVICE_ERROR
    default_status = 502

    @classmethod
    def wrap(cls, operation: str, exc: Exception) -> Self:
        """Re-raise-ready error prefixed with the failing operation; keeps the cause."""
        status = exc.status_code if isinstance(exc, AppError) else None
        message = f"{operation} failed: {exc}" if str(exc) else f"{operation} failed"
        err = cls(message, status)
        err.__cause__ = exc
        return err


class RateLimitError(ExternalServiceError):
    """Too many calls already queued for the upstream."""

    code = ErrorCode.RATE_LIMITED
    default_status = 429



class UpstreamTimeoutError(ExternalServiceError):
    """Upstream did not answer within the configured timeout."""

    code = ErrorCode.TIMEOUT
    default_status = 504


# Kinds whose message reaches the caller
RECOGNIZED_ERRORS: tuple[type[AppError], ...] = (ValidationError, AuthError, ExternalServiceError)

INTERNAL_ERROR_MESSAGE = "Internal server error"


def public_message(exc: BaseException) -> str:
    """Message safe to send back over the channel."""
    if isinstance(exc, RECOGNIZED_ERRORS):
        return exc.message
    return INTERNAL_ERROR_MESSAGE
