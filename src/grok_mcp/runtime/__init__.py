"""Runtime primitives for upstream calls."""

from .limiter import Limiter

__all__ = ["Limiter"]
