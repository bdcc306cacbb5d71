# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Search tools.

``search`` without an index, or with an index that does not exist, falls back
to a fan-out over every index (``global-search``). In the fan-out a failing
index contributes no hits instead of failing the whole search.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from ..core.exceptions import MeiliMCPException, ValidationException
from ..core.meilisearch import MeilisearchClient
from ..core.registry import ToolRegistry
from ..core.response import create_text_response
from ._utils import INDEX_UID, coerce_json, index_path, pick, schema

logger = logging.getLogger(__name__)

STRING_LIST = {"type": "array", "items": {"type": "string"}}

SEARCH_PROPERTIES: dict[str, Any] = {
    "indexUid": {**INDEX_UID, "description": "Unique identifier of the index (omit to search every index)"},
    "q": {"type": "string", "description": "Search query"},
    "limit": {"type": "integer", "minimum": 1, "description": "Maximum number of results to return (default: 20)"},
    "offset": {"type": "integer", "minimum": 0, "description": "Number of results to skip (default: 0)"},
    "filter": {
        "anyOf": [{"type": "string"}, STRING_LIST],
        "description": "Filter query to apply",
    },
    "sort": {**STRING_LIST, "description": 'Attributes to sort by, e.g. ["price:asc"]'},
    "facets": {**STRING_LIST, "description": "Facets to return"},
    "attributesToRetrieve": {**STRING_LIST, "description": "Attributes to include in results (default: all)"},
    "attributesToCrop": {**STRING_LIST, "description": "Attributes to crop"},
    "cropLength": {"type": "integer", "description": "Length at which to crop cropped attributes"},
    "attributesToHighlight": {**STRING_LIST, "description": "Attributes to highlight"},
    "highlightPreTag": {"type": "string", "description": "Tag to insert before highlighted text"},
    "highlightPostTag": {"type": "string", "description": "Tag to insert after highlighted text"},
    "showMatchesPosition": {"type": "boolean", "description": "Whether to include match positions in results"},
    "matchingStrategy": {"type": "string", "description": "Matching strategy: 'all', 'last' or 'frequency'"},
}

SEARCH_BODY_FIELDS = tuple(name for name in SEARCH_PROPERTIES if name != "indexUid")


async def list_index_uids(client: MeilisearchClient) -> list[str]:
    data = await client.get("/indexes", params={"limit": 1000})
    return [index["uid"] for index in data.get("results", [])]


async def global_search(
    client: MeilisearchClient,
    q: str,
    index_uids: list[str],
    limit: int | None = None,
    attributes_to_retrieve: list[str] | None = None,
) -> dict[str, Any]:
    """Search every index concurrently and merge the hits."""
    if not index_uids:
        return {"hits": [], "message": "No indexes found in Meilisearch."}

    body: dict[str, Any] = {"q": q}
    if limit is not None:
        body["limit"] = limit
    if attributes_to_retrieve is not None:
        body["attributesToRetrieve"] = attributes_to_retrieve

    async def search_one(uid: str) -> list[dict[str, Any]]:
        try:
            result = await client.post(index_path(uid, "search"), body)
        except MeiliMCPException as e:
            logger.debug(f"Global search skipped index {uid}: {e.message}")
            return []
        return [{"indexUid": uid, **hit} for hit in result.get("hits", [])]

    per_index = await asyncio.gather(*(search_one(uid) for uid in index_uids))
    return {"limit": limit, "query": q, "hits": [hit for hits in per_index for hit in hits]}


def register_search_tools(registry: ToolRegistry, client: MeilisearchClient) -> None:
    @registry.tool(
        "search",
        "Search for documents in a Meilisearch index",
        {"type": "object", "properties": SEARCH_PROPERTIES, "required": ["q"]},
    )
    async def search(args: dict[str, Any]) -> dict[str, Any]:
        index_uid = args.get("indexUid")
        index_uids = await list_index_uids(client)
        if not index_uid or index_uid not in index_uids:
            return create_text_response(
                await global_search(client, args["q"], index_uids, args.get("limit"), args.get("attributesToRetrieve"))
            )
        body = pick(args, *SEARCH_BODY_FIELDS)
        return create_text_response(await client.post(index_path(index_uid, "search"), body))

    @registry.tool(
        "multi-search",
        "Perform multiple searches in one request",
        schema(
            {
                "queries": {
                    "type": "array",
                    "items": {"type": "object", "properties": SEARCH_PROPERTIES, "required": ["indexUid"]},
                    "description": "Array of search queries, each containing the same parameters as the `search` tool",
                },
            },
            ["queries"],
        ),
    )
    async def multi_search(args: dict[str, Any]) -> dict[str, Any]:
        queries = coerce_json(args["queries"], "queries")
        if not isinstance(queries, list):
            raise ValidationException("Queries must be a JSON array", field="queries")
        for query in queries:
            if not isinstance(query, dict) or not query.get("indexUid"):
                raise ValidationException("Each search must have an indexUid field", field="queries")
        return create_text_response(await client.post("/multi-search", {"queries": queries}))

    @registry.tool(
        "global-search",
        "Search for a term across all available Meilisearch indexes and return combined results",
        schema(
            {
                "q": {"type": "string", "description": "Search query"},
                "limit": {"type": "integer", "minimum": 1, "description": "Maximum number of results to return per index (default: 20)"},
                "attributesToRetrieve": {**STRING_LIST, "description": "Attributes to include in results"},
            },
            ["q"],
        ),
    )
    async def global_search_tool(args: dict[str, Any]) -> dict[str, Any]:
        index_uids = await list_index_uids(client)
        return create_text_response(
            await global_search(client, args["q"], index_uids, args.get("limit"), args.get("attributesToRetrieve"))
        )

    @registry.tool(
        "facet-search",
        "Search for facet values matching specific criteria",
        schema(
            {
                "indexUid": INDEX_UID,
                "facetName": {"type": "string", "description": "Name of the facet to search"},
                "facetQuery": {"type": "string", "description": "Query to match against facet values"},
                "q": {"type": "string", "description": "Search query for the base search"},
                "filter": {"type": "string", "description": "Filter to apply to the base search"},
            },
            ["indexUid", "facetName"],
        ),
    )
    async def facet_search(args: dict[str, Any]) -> dict[str, Any]:
        body = pick(args, "facetName", "facetQuery", "q", "filter")
        return create_text_response(await client.post(index_path(args["indexUid"], "facet-search"), body))
