# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Index management tools."""

from __future__ import annotations

from typing import Any

from ..core.exceptions import ValidationException
from ..core.meilisearch import MeilisearchClient
from ..core.registry import ToolRegistry
from ..core.response import create_text_response
from ._utils import INDEX_UID, coerce_json, index_path, pick, schema


def register_index_tools(registry: ToolRegistry, client: MeilisearchClient) -> None:
    @registry.tool(
        "list-indexes",
        "List all indexes in the Meilisearch instance",
        schema(
            {
                "limit": {"type": "integer", "minimum": 1, "maximum": 100, "description": "Maximum number of indexes to return"},
                "offset": {"type": "integer", "minimum": 0, "description": "Number of indexes to skip"},
            }
        ),
    )
    async def list_indexes(args: dict[str, Any]) -> dict[str, Any]:
        return create_text_response(await client.get("/indexes", params=pick(args, "limit", "offset")))

    @registry.tool(
        "get-index",
        "Get information about a specific Meilisearch index",
        schema({"indexUid": INDEX_UID}, ["indexUid"]),
    )
    async def get_index(args: dict[str, Any]) -> dict[str, Any]:
        return create_text_response(await client.get(index_path(args["indexUid"])))

    @registry.tool(
        "create-index",
        "Create a new Meilisearch index",
        schema(
            {
                "indexUid": {"type": "string", "description": "Unique identifier for the new index"},
                "primaryKey": {"type": "string", "description": "Primary key for the index"},
            },
            ["indexUid"],
        ),
    )
    async def create_index(args: dict[str, Any]) -> dict[str, Any]:
        body = {"uid": args["indexUid"], **pick(args, "primaryKey")}
        return create_text_response(await client.post("/indexes", body))

    @registry.tool(
        "update-index",
        "Update a Meilisearch index (currently only supports updating the primary key)",
        schema(
            {
                "indexUid": INDEX_UID,
                "primaryKey": {"type": "string", "description": "New primary key for the index"},
            },
            ["indexUid", "primaryKey"],
        ),
    )
    async def update_index(args: dict[str, Any]) -> dict[str, Any]:
        return create_text_response(await client.patch(index_path(args["indexUid"]), {"primaryKey": args["primaryKey"]}))

    @registry.tool(
        "delete-index",
        "Delete a Meilisearch index",
        schema({"indexUid": {"type": "string", "description": "Unique identifier of the index to delete"}}, ["indexUid"]),
    )
    async def delete_index(args: dict[str, Any]) -> dict[str, Any]:
        return create_text_response(await client.delete(index_path(args["indexUid"])))

    @registry.tool(
        "swap-indexes",
        "Swap two or more indexes in Meilisearch",
        schema(
            {
                "indexes": {
                    "description": 'Array of index pairs to swap, e.g. [["movies", "movies_new"]]. A JSON string is also accepted.',
                },
            },
            ["indexes"],
        ),
    )
    async def swap_indexes(args: dict[str, Any]) -> dict[str, Any]:
        pairs = coerce_json(args["indexes"], "indexes")
        if not isinstance(pairs, list) or not all(isinstance(p, list) and len(p) == 2 for p in pairs):
            raise ValidationException(
                'Indexes must be a JSON array of pairs, e.g. [["movies", "movies_new"]]',
                field="indexes",
            )
        body = [{"indexes": pair} for pair in pairs]
        return create_text_response(await client.post("/swap-indexes", body))
