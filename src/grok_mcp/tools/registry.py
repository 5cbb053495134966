"""Registry of the tools the server exposes."""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel

from ..client import GrokClient
from ..observability import MemoryMetricsBackend
from .ask import AskTool
from .base import GrokTool
from .chat import ChatTool
from .diagnostics import HealthTool, ModelsTool, TestConnectionTool
from .search import SearchTool


class ToolRegistry:
    """Tool lookup by name, in registration order.

    Example:
        >>> registry = ToolRegistry()
        >>> registry.register(AskTool(client))
        >>> registry.get("grok_ask")
        <AskTool grok_ask>
    """

    __slots__ = ("_tools",)

    def __init__(self) -> None:
        self._tools: dict[str, GrokTool[BaseModel]] = {}

    def register(self, tool: GrokTool[BaseModel]) -> None:
        name = tool.metadata.name
        if name in self._tools:
            raise ValueError(f"Tool '{name}' already registered.")
        self._tools[name] = tool

    def get(self, name: str) -> GrokTool[BaseModel] | None:
        return self._tools.get(name)

    def __getitem__(self, name: str) -> GrokTool[BaseModel]:
        return self._tools[name]

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[GrokTool[BaseModel]]:
        return iter(self._tools.values())


def default_registry(client: GrokClient, metrics: MemoryMetricsBackend) -> ToolRegistry:
    """The six Grok tools, wired to one client and metrics backend."""
    registry = ToolRegistry()
    for tool in (
        AskTool(client),
        ChatTool(client),
        SearchTool(client),
        ModelsTool(client),
        TestConnectionTool(client),
        HealthTool(metrics, client),
    ):
        registry.register(tool)
    return registry
