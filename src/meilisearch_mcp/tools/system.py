# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""System tools: health, version, stats."""

from __future__ import annotations

from typing import Any

from ..core.exceptions import MeiliMCPException
from ..core.meilisearch import MeilisearchClient
from ..core.registry import ToolRegistry
from ..core.response import create_text_response, format_error
from ._utils import INDEX_UID, index_path, schema


def register_system_tools(registry: ToolRegistry, client: MeilisearchClient) -> None:
    @registry.tool("health", "Check if the Meilisearch server is healthy")
    async def health(args: dict[str, Any]) -> dict[str, Any]:
        return create_text_response(await client.health())

    @registry.tool("version", "Get the version information of the Meilisearch server")
    async def version(args: dict[str, Any]) -> dict[str, Any]:
        return create_text_response(await client.get("/version"))

    @registry.tool("info", "Get connection and version information about the Meilisearch server")
    async def info(args: dict[str, Any]) -> dict[str, Any]:
        data: dict[str, Any] = {"host": client.host}
        try:
            data["health"] = (await client.health()).get("status")
            data["version"] = await client.get("/version")
        except MeiliMCPException as e:
            data["health"] = "unreachable"
            data["error"] = format_error(e)
        return create_text_response(data)

    @registry.tool("stats", "Get statistics about all indexes in the Meilisearch server")
    async def stats(args: dict[str, Any]) -> dict[str, Any]:
        return create_text_response(await client.get("/stats"))

    @registry.tool(
        "get-index-stats",
        "Get statistics about a specific Meilisearch index",
        schema({"indexUid": INDEX_UID}, ["indexUid"]),
    )
    async def get_index_stats(args: dict[str, Any]) -> dict[str, Any]:
        return create_text_response(await client.get(index_path(args["indexUid"], "stats")))
