"""Upstream Grok API client and search-result extraction."""

from .client import FALLBACK_MODELS, GrokClient
from .search import extract_results, fallback_results, parse_simulated, title_from_url

__all__ = [
    "FALLBACK_MODELS",
    "GrokClient",
    "extract_results",
    "fallback_results",
    "parse_simulated",
    "title_from_url",
]
