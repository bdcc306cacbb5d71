"""Stdio MCP Server for Meilisearch.

Exposes the same tool registry as the HTTP server, for clients that spawn
the server as a subprocess.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from ..core.backends import create_backend
from ..core.config import get_config
from ..core.exceptions import ConfigException, MeiliMCPException
from ..core.logging import configure_logging
from ..core.meilisearch import MeilisearchClient
from ..core.registry import ToolRegistry
from ..core.response import format_error, response_text
from ..tools import build_registry

logger = logging.getLogger(__name__)


class ToolCallError(Exception):
    """A tool returned an error envelope; the lowlevel server reports it as isError."""


def create_server(registry: ToolRegistry, name: str = "meilisearch") -> Server:
    """Build a lowlevel MCP server backed by *registry*."""
    server = Server(name)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """List all available tools."""
        return registry.list_tools()

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        """Route tool calls through the registry."""
        result = await registry.call(name, arguments or {})
        text = response_text(result)
        if result.get("isError"):
            raise ToolCallError(text)
        return [TextContent(type="text", text=text)]

    return server


def build_stdio_registry() -> tuple[ToolRegistry, MeilisearchClient]:
    config = get_config()
    client = MeilisearchClient.from_settings(config)
    try:
        backend = create_backend(config)
    except ConfigException as e:
        logger.warning(f"AI tools disabled: {e.message}")
        backend = None
    registry, _, _ = build_registry(client, backend, config.summary_chunk_size)
    return registry, client


async def check_connection(client: MeilisearchClient) -> int:
    try:
        health = await client.health()
    except MeiliMCPException as e:
        print(f"Meilisearch unreachable: {format_error(e)}", file=sys.stderr)
        return 1
    print(f"Meilisearch at {client.host}: {health.get('status', 'unknown')}", file=sys.stderr)
    return 0


def run() -> None:
    """Run the stdio MCP server."""
    parser = argparse.ArgumentParser(description="Meilisearch MCP Server (stdio)")
    parser.add_argument("--health-check", action="store_true", help="Check the Meilisearch connection and exit")
    args = parser.parse_args()

    configure_logging()
    registry, client = build_stdio_registry()

    if args.health_check:
        async def health_main() -> int:
            try:
                return await check_connection(client)
            finally:
                await client.aclose()

        sys.exit(asyncio.run(health_main()))

    logger.info(f"Meilisearch stdio MCP server starting with {len(registry)} tools")
    server = create_server(registry)

    async def main():
        try:
            async with stdio_server() as (read_stream, write_stream):
                await server.run(read_stream, write_stream, server.create_initialization_options())
        finally:
            await client.aclose()

    asyncio.run(main())


if __name__ == "__main__":
    run()
