"""Error kinds and the Result type.

- ErrorCode: machine-readable classification
- AppError and subclasses: ValidationError, AuthError, ExternalServiceError, RateLimitError, UpstreamTimeoutError
- Result/Ok/Err: never-raising operations
"""

from .errors import (
    INTERNAL_ERROR_MESSAGE,
    RECOGNIZED_ERRORS,
    AppError,
    AuthError,
    ErrorCode,
    ExternalServiceError,
    RateLimitError,
    UpstreamTimeoutError,
    ValidationError,
    public_message,
)
from .result import Err, Ok, Result

__all__ = [
    "AppError", "AuthError", "ErrorCode", "ExternalServiceError", "RateLimitError", "UpstreamTimeoutError",
    "ValidationError",
    "INTERNAL_ERROR_MESSAGE", "RECOGNIZED_ERRORS", "public_message",
    "Result", "Ok", "Err",
]
