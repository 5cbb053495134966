"""Pipeline stages as continuation-passing middleware.

Default order (outermost first): metrics, logging, auth, sanitize, validation.
"""

from .auth import UNAUTHORIZED, AuthMiddleware, token_matches
from .logging import LoggingMiddleware
from .metrics import ERRORS_TOTAL, REQUEST_LATENCY_MS, REQUESTS_TOTAL, MetricsMiddleware
from .middleware import Context, Middleware, Next, Params, Stage, compose, dispatch
from .sanitize import SanitizeMiddleware, sanitize
from .validation import ValidationMiddleware

__all__ = [
    # Core
    "Context", "Middleware", "Next", "Params", "Stage", "compose", "dispatch",
    # Stages
    "AuthMiddleware", "LoggingMiddleware", "MetricsMiddleware", "SanitizeMiddleware", "ValidationMiddleware",
    # Helpers
    "sanitize", "token_matches", "UNAUTHORIZED",
    "REQUESTS_TOTAL", "ERRORS_TOTAL", "REQUEST_LATENCY_MS",
]
