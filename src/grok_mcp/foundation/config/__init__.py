"""Configuration management using pydantic-settings."""

from .settings import (
    CacheSettings,
    GrokSettings,
    LimiterSettings,
    LoggingSettings,
    SearchMode,
    UpstreamConfig,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "CacheSettings",
    "GrokSettings",
    "LimiterSettings",
    "LoggingSettings",
    "SearchMode",
    "UpstreamConfig",
    "clear_settings_cache",
    "get_settings",
]
