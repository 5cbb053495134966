"""Environment-based configuration using pydantic-settings.

Variables keep the names operators already export for the server
(XAI_API_KEY, GROK_MODEL, ...). A `.env` file in the working directory is
read as a fallback; real environment variables win.

Example:
    >>> from grok_mcp.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.upstream_config().base_url
    'https://api.x.ai/v1'

    # Or with environment variables:
    # XAI_API_KEY=xai-...
    # GROK_CACHE_TTL=600
    # LOG_LEVEL=debug
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    PositiveFloat,
    PositiveInt,
    SecretStr,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://api.x.ai/v1"
DEFAULT_MODEL = "grok-4.1-fast"

Temperature = Annotated[float, Field(ge=0.0, le=1.0)]
SearchMode = Literal["auto", "native", "simulated"]


class UpstreamConfig(BaseModel):
    """Immutable record the upstream client is built from."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    api_key: SecretStr
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    temperature: Temperature = 0.7
    max_tokens: PositiveInt = 4000
    timeout: PositiveFloat = 60.0


class CacheSettings(BaseSettings):
    """Response cache configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GROK_CACHE_",
        env_file=".env",
        extra="ignore",
    )

    ttl: PositiveFloat = Field(default=300.0, description="Entry lifetime in seconds")
    max_size: PositiveInt = Field(default=100, description="Max cache entries")


class LimiterSettings(BaseSettings):
    """Outbound concurrency limits toward the upstream."""

    model_config = SettingsConfigDict(
        env_prefix="GROK_LIMIT_",
        env_file=".env",
        extra="ignore",
    )

    max_concurrent: PositiveInt = Field(default=2, description="Max in-flight upstream calls")
    min_interval: Annotated[float, Field(ge=0.0)] = Field(default=0.5, description="Seconds between dispatches")
    max_queue: NonNegativeInt = Field(default=100, description="Max callers waiting for a slot (0 = unbounded)")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", validation_alias="LOG_LEVEL",
    )
    format: Literal["console", "json", "none"] = Field(default="console", validation_alias="LOG_FORMAT")

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        """Accept pino-style lowercase levels (info, warn, ...)."""
        if not isinstance(v, str):
            return v
        v = v.upper()
        return {"WARN": "WARNING", "FATAL": "CRITICAL", "TRACE": "DEBUG"}.get(v, v)

    @field_validator("format", mode="before")
    @classmethod
    def _normalize_format(cls, v: str) -> str:
        return v.lower() if isinstance(v, str) else v


class GrokSettings(BaseSettings):
    """Root settings for the Grok MCP server.

    Only XAI_API_KEY is required; construction fails without it.

    Example environment variables:
        XAI_API_KEY=xai-...
        XAI_BASE_URL=https://api.x.ai/v1
        GROK_MODEL=grok-4-1-fast-reasoning
        SHARED_SECRET=s3cret
        GROK_LIMIT_MAX_CONCURRENT=4
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
        validate_default=True,
    )

    api_key: SecretStr = Field(..., validation_alias="XAI_API_KEY")
    base_url: str = Field(default=DEFAULT_BASE_URL, validation_alias="XAI_BASE_URL")
    model: str = Field(default=DEFAULT_MODEL, validation_alias="GROK_MODEL")
    temperature: Temperature = Field(default=0.7, validation_alias="GROK_TEMPERATURE")
    max_tokens: PositiveInt = Field(default=4000, validation_alias="GROK_MAX_TOKENS")
    timeout: PositiveFloat = Field(default=60.0, validation_alias="GROK_TIMEOUT")
    search_mode: SearchMode = Field(default="auto", validation_alias="GROK_SEARCH_MODE")

    shared_secret: SecretStr | None = Field(default=None, validation_alias="SHARED_SECRET")
    server_name: str = Field(default="grok-4-mcp-server", validation_alias="MCP_SERVER_NAME")
    server_version: str = Field(default="1.0.0", validation_alias="MCP_SERVER_VERSION")

    cache: CacheSettings = Field(default_factory=CacheSettings)
    limiter: LimiterSettings = Field(default_factory=LimiterSettings)
    log: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("api_key")
    @classmethod
    def _require_key(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value().strip():
            raise ValueError("XAI_API_KEY must not be empty")
        return v

    @field_validator("shared_secret")
    @classmethod
    def _empty_secret_disables_auth(cls, v: SecretStr | None) -> SecretStr | None:
        return v if v is not None and v.get_secret_value() else None

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("search_mode", mode="before")
    @classmethod
    def _normalize_mode(cls, v: str) -> str:
        return v.lower() if isinstance(v, str) else v

    @property
    def auth_enabled(self) -> bool:
        return self.shared_secret is not None

    def upstream_config(self) -> UpstreamConfig:
        """Freeze the upstream-facing subset of the settings."""
        return UpstreamConfig(
            api_key=self.api_key,
            base_url=self.base_url,
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            timeout=self.timeout,
        )


@lru_cache(maxsize=1)
def get_settings() -> GrokSettings:
    """Get the process settings (cached).

    Raises:
        pydantic.ValidationError: when XAI_API_KEY is missing or invalid values are set
    """
    return GrokSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
