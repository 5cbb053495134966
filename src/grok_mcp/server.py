"""MCP stdio server: transport adapter and process bootstrap.

The transport only decodes calls and encodes responses. Argument checking
happens in the request pipeline, so the SDK's own input validation is off:
it would reject inputs the pipeline deliberately accepts (e.g. a fractional
`max_results`) and would answer unknown tools with a protocol error.

Usage:
    XAI_API_KEY=xai-... grok-mcp
    # or
    python -m grok_mcp
"""

from __future__ import annotations

import asyncio
import sys
from typing import Any

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server
from pydantic import ValidationError as PydanticValidationError

from .context import ServerContext, build_context
from .foundation.config import GrokSettings, get_settings
from .observability import configure_logging, get_logger
from .pipeline import ToolRequest
from .tools import GrokTool, ToolResponse

log = get_logger("grok_mcp.server")

AUTH_ARGUMENT = "auth"


def tool_definition(tool: GrokTool[Any], *, auth_enabled: bool = False) -> types.Tool:
    """MCP Tool definition from the tool's metadata and params schema."""
    schema = tool.input_schema()
    if auth_enabled:
        properties = dict(schema["properties"])  # type: ignore[arg-type]
        properties[AUTH_ARGUMENT] = {"type": "string", "description": "Shared secret for this server"}
        schema = {**schema, "properties": properties}
    return types.Tool(name=tool.metadata.name, description=tool.metadata.description, inputSchema=schema)


def to_content(response: ToolResponse) -> list[types.TextContent]:
    return [types.TextContent(type="text", text=text) for text in response.content]


def split_auth(arguments: dict[str, Any] | None) -> tuple[dict[str, object], str | None]:
    """Separate the credential from the tool arguments."""
    args = dict(arguments or {})
    token = args.pop(AUTH_ARGUMENT, None)
    return args, token if isinstance(token, str) else None


def create_server(context: ServerContext) -> Server:
    """Low-level MCP server bound to one ServerContext."""
    settings = context.settings
    server: Server = Server(settings.server_name, version=settings.server_version)
    tools = [tool_definition(t, auth_enabled=settings.auth_enabled) for t in context.registry]

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return tools

    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[types.TextContent]:
        args, token = split_auth(arguments)
        response = await context.pipeline.handle(ToolRequest(name, args, token))
        return to_content(response)

    @server.list_prompts()
    async def list_prompts() -> list[types.Prompt]:
        return []

    @server.list_resources()
    async def list_resources() -> list[types.Resource]:
        return []

    return server


async def run(settings: GrokSettings) -> None:
    """Serve over stdio until the client disconnects."""
    context = build_context(settings)
    server = create_server(context)
    log.info(
        "server ready",
        name=settings.server_name,
        version=settings.server_version,
        model=settings.model,
        search_mode=settings.search_mode,
        auth=settings.auth_enabled,
        tools=len(context.registry),
    )
    try:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
    finally:
        await context.aclose()
        log.info("server stopped")


def main() -> None:
    """Console entry point. Exits with status 1 when configuration is invalid."""
    try:
        settings = get_settings()
    except PydanticValidationError as e:
        configure_logging()
        for err in e.errors():
            field = ".".join(str(p) for p in err["loc"]) or "settings"
            log.error("invalid configuration", field=field, error=err["msg"])
        if any(err["loc"] and err["loc"][0] in ("XAI_API_KEY", "api_key") for err in e.errors()):
            log.error("XAI_API_KEY environment variable is required")
        sys.exit(1)

    configure_logging(format=settings.log.format, level=settings.log.level)
    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        log.info("interrupted")


if __name__ == "__main__":
    main()
