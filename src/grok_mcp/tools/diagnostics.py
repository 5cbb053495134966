"""Diagnostic tools: model listing, connection probe, server health.

None of these raise on upstream trouble; they report it in their text.
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel

from ..client import GrokClient
from ..observability import MemoryMetricsBackend
from .base import EmptyParams, GrokTool, ToolMetadata, ToolResponse

CONNECTION_OK = "✅ Grok API connection successful! Ready to use Grok 4."
CONNECTION_FAILED = "❌ Grok API connection failed. Please check your API key and configuration."
HEALTHY = "OK: Grok 4 MCP Server healthy"


class ModelsTool(GrokTool[EmptyParams]):
    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="grok_models", description="List available Grok models", category="diagnostics",
    )
    params_schema: ClassVar[type[BaseModel]] = EmptyParams

    def __init__(self, client: GrokClient) -> None:
        self.client = client

    async def run(self, params: EmptyParams) -> ToolResponse:
        models = await self.client.get_models()
        return ToolResponse.text("Available Grok models:\n" + "\n".join(f"- {m}" for m in models))


class TestConnectionTool(GrokTool[EmptyParams]):
    __test__ = False  # not a pytest test class

    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="grok_test_connection",
        description="Test the connection to Grok API to verify setup",
        category="diagnostics",
    )
    params_schema: ClassVar[type[BaseModel]] = EmptyParams

    def __init__(self, client: GrokClient) -> None:
        self.client = client

    async def run(self, params: EmptyParams) -> ToolResponse:
        ok = await self.client.test_connection()
        return ToolResponse.text(CONNECTION_OK if ok else CONNECTION_FAILED)


class HealthTool(GrokTool[EmptyParams]):
    """Liveness plus a snapshot of request metrics, cache and limiter state."""

    metadata: ClassVar[ToolMetadata] = ToolMetadata(
        name="grok_health",
        description="Check the health of the MCP server and its dependencies",
        category="diagnostics",
    )
    params_schema: ClassVar[type[BaseModel]] = EmptyParams

    def __init__(self, metrics: MemoryMetricsBackend, client: GrokClient) -> None:
        self.metrics = metrics
        self.client = client

    async def run(self, params: EmptyParams) -> ToolResponse:
        snapshot: dict[str, object] = {
            **self.metrics.snapshot(),
            "cache": self.client.cache.stats(),
            "limiter": self.client.limiter.stats(),
        }
        return ToolResponse.text(HEALTHY, self.metrics.render(), metrics=snapshot)
