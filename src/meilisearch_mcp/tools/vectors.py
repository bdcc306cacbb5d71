# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Vector search tools.

Vector search is an experimental Meilisearch feature: ``enable-vector-search``
turns it on for the instance, embedders are configured per index, and
``vector-search`` queries with a raw vector or through a named embedder.
"""

from __future__ import annotations

from typing import Any

from ..core.exceptions import ValidationException
from ..core.meilisearch import MeilisearchClient
from ..core.registry import ToolRegistry
from ..core.response import create_text_response
from ._utils import INDEX_UID, coerce_json, index_path, pick, schema

DEFAULT_SEMANTIC_RATIO = 0.5


def _vector(value: Any) -> list[float]:
    vector = coerce_json(value, "vector")
    if not isinstance(vector, list) or not all(isinstance(v, (int, float)) for v in vector):
        raise ValidationException("Vector must be a JSON array of numbers", field="vector")
    return vector


def build_vector_query(args: dict[str, Any]) -> dict[str, Any]:
    """Translate ``vector-search`` arguments into a Meilisearch search body."""
    embedder = args.get("embedder")
    query = args.get("query")
    if "vector" not in args and not (embedder and query is not None):
        raise ValidationException("Either 'vector' or both 'embedder' and 'query' must be provided")

    body: dict[str, Any] = pick(args, "limit", "offset", "filter")
    if "vector" in args:
        body["vector"] = _vector(args["vector"])
    if query is not None:
        body["q"] = query
    if args.get("attributes"):
        body["attributesToRetrieve"] = args["attributes"]

    # Without hybrid, an embedder query is purely semantic.
    if args.get("hybrid"):
        ratio = args.get("hybridRatio", DEFAULT_SEMANTIC_RATIO)
    else:
        ratio = 1.0
    if embedder or args.get("hybrid"):
        hybrid: dict[str, Any] = {"semanticRatio": ratio}
        if embedder:
            hybrid["embedder"] = embedder
        body["hybrid"] = hybrid
    return body


def register_vector_tools(registry: ToolRegistry, client: MeilisearchClient) -> None:
    @registry.tool("enable-vector-search", "Enable the vector search experimental feature in Meilisearch")
    async def enable_vector_search(args: dict[str, Any]) -> dict[str, Any]:
        return create_text_response(await client.patch("/experimental-features", {"vectorStore": True}))

    @registry.tool("get-experimental-features", "Get the status of experimental features in Meilisearch")
    async def get_experimental_features(args: dict[str, Any]) -> dict[str, Any]:
        return create_text_response(await client.get("/experimental-features"))

    @registry.tool(
        "get-embedders",
        "Get the embedders configuration for an index",
        schema({"indexUid": INDEX_UID}, ["indexUid"]),
    )
    async def get_embedders(args: dict[str, Any]) -> dict[str, Any]:
        return create_text_response(await client.get(index_path(args["indexUid"], "settings", "embedders")))

    @registry.tool(
        "update-embedders",
        "Configure embedders for vector search",
        schema(
            {
                "indexUid": INDEX_UID,
                "embedders": {"description": "Object of embedder configurations keyed by name (a JSON string is also accepted)"},
            },
            ["indexUid", "embedders"],
        ),
    )
    async def update_embedders(args: dict[str, Any]) -> dict[str, Any]:
        embedders = coerce_json(args["embedders"], "embedders")
        if not isinstance(embedders, dict):
            raise ValidationException("Embedders must be a JSON object", field="embedders")
        return create_text_response(
            await client.patch(index_path(args["indexUid"], "settings", "embedders"), embedders)
        )

    @registry.tool(
        "reset-embedders",
        "Reset the embedders configuration for an index",
        schema({"indexUid": INDEX_UID}, ["indexUid"]),
    )
    async def reset_embedders(args: dict[str, Any]) -> dict[str, Any]:
        return create_text_response(await client.delete(index_path(args["indexUid"], "settings", "embedders")))

    @registry.tool(
        "vector-search",
        "Perform a vector search in a Meilisearch index",
        schema(
            {
                "indexUid": INDEX_UID,
                "vector": {"description": "Vector to search for, as an array of numbers (a JSON string is also accepted)"},
                "limit": {"type": "integer", "minimum": 1, "maximum": 1000, "description": "Maximum number of results to return (default: 20)"},
                "offset": {"type": "integer", "minimum": 0, "description": "Number of results to skip (default: 0)"},
                "filter": {"type": "string", "description": "Filter to apply, e.g. 'genre = horror AND year > 2020'"},
                "embedder": {"type": "string", "description": "Name of the embedder to use (required without 'vector')"},
                "attributes": {"type": "array", "items": {"type": "string"}, "description": "Attributes to include in results"},
                "query": {"type": "string", "description": "Text query, embedded with 'embedder' when no vector is given"},
                "hybrid": {"type": "boolean", "description": "Combine vector and keyword search"},
                "hybridRatio": {
                    "type": "number",
                    "minimum": 0,
                    "maximum": 1,
                    "description": "Share of the semantic side in hybrid search (default: 0.5)",
                },
            },
            ["indexUid"],
        ),
    )
    async def vector_search(args: dict[str, Any]) -> dict[str, Any]:
        body = build_vector_query(args)
        return create_text_response(await client.post(index_path(args["indexUid"], "search"), body))
