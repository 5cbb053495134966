"""Foundation - configuration, error kinds and upstream wire types."""

from __future__ import annotations

from .config import GrokSettings, UpstreamConfig, clear_settings_cache, get_settings
from .errors import (
    AppError,
    AuthError,
    Err,
    ErrorCode,
    ExternalServiceError,
    Ok,
    RateLimitError,
    Result,
    ValidationError,
)

__all__ = [
    # Config
    "GrokSettings", "UpstreamConfig", "get_settings", "clear_settings_cache",
    # Errors
    "AppError", "AuthError", "ErrorCode", "ExternalServiceError", "RateLimitError", "ValidationError",
    "Result", "Ok", "Err",
]
