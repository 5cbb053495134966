"""Tools exposed over MCP, with their parameter schemas."""

from .ask import AskParams, AskTool
from .base import EmptyParams, GrokTool, ToolMetadata, ToolResponse
from .chat import ChatParams, ChatTool, MessageParam
from .diagnostics import HealthTool, ModelsTool, TestConnectionTool
from .registry import ToolRegistry, default_registry
from .search import SearchParams, SearchTool, format_results

__all__ = [
    # Contract
    "GrokTool", "ToolMetadata", "ToolResponse", "EmptyParams",
    # Tools & schemas
    "AskParams", "AskTool", "ChatParams", "ChatTool", "MessageParam",
    "SearchParams", "SearchTool", "format_results",
    "HealthTool", "ModelsTool", "TestConnectionTool",
    # Registry
    "ToolRegistry", "default_registry",
]
