"""grok-mcp - MCP server for the xAI Grok API.

Exposes six tools (grok_ask, grok_chat, grok_search, grok_models,
grok_test_connection, grok_health) over stdio. Calls pass through an
auth/sanitize/validate pipeline before reaching a cached, rate-limited
upstream client.

Quick Start:
    $ export XAI_API_KEY=xai-...
    $ grok-mcp

Programmatic:
    >>> from grok_mcp import GrokSettings, build_context, ToolRequest
    >>> context = build_context(GrokSettings(XAI_API_KEY="xai-..."))
    >>> response = await context.pipeline.handle(ToolRequest("grok_models"))
    >>> print(response.first_text)
    Available Grok models:
    - grok-4
    ...
"""

from .client import FALLBACK_MODELS, GrokClient
from .context import ServerContext, build_context
from .foundation import (
    AppError,
    AuthError,
    ExternalServiceError,
    GrokSettings,
    RateLimitError,
    UpstreamConfig,
    ValidationError,
    get_settings,
)
from .pipeline import RequestPipeline, ToolRequest
from .tools import ToolRegistry, ToolResponse

__version__ = "1.0.0"

__all__ = [
    "__version__",
    # Config
    "GrokSettings", "UpstreamConfig", "get_settings",
    # Errors
    "AppError", "AuthError", "ExternalServiceError", "RateLimitError", "ValidationError",
    # Client
    "FALLBACK_MODELS", "GrokClient",
    # Pipeline
    "RequestPipeline", "ServerContext", "ToolRegistry", "ToolRequest", "ToolResponse", "build_context",
]
