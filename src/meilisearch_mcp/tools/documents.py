# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Document tools."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from ..core.exceptions import ValidationException
from ..core.meilisearch import MeilisearchClient
from ..core.registry import ToolRegistry
from ..core.response import create_text_response
from ._utils import INDEX_UID, coerce_json, index_path, join_list, pick, schema

FIELDS = {"type": "array", "items": {"type": "string"}, "description": "Fields to return"}


def _document_list(value: Any, field: str) -> list[Any]:
    documents = coerce_json(value, field)
    if isinstance(documents, dict):
        documents = [documents]
    if not isinstance(documents, list):
        raise ValidationException(f"{field} must be a JSON array", field=field)
    return documents


def register_document_tools(registry: ToolRegistry, client: MeilisearchClient) -> None:
    @registry.tool(
        "get-documents",
        "Get documents from a Meilisearch index",
        schema(
            {
                "indexUid": INDEX_UID,
                "limit": {"type": "integer", "minimum": 1, "maximum": 1000, "description": "Maximum number of documents to return (default: 20)"},
                "offset": {"type": "integer", "minimum": 0, "description": "Number of documents to skip (default: 0)"},
                "fields": FIELDS,
                "filter": {"type": "string", "description": "Filter query to apply"},
            },
            ["indexUid"],
        ),
    )
    async def get_documents(args: dict[str, Any]) -> dict[str, Any]:
        params = pick(args, "limit", "offset", "filter")
        if "fields" in args:
            params["fields"] = join_list(args["fields"])
        return create_text_response(await client.get(index_path(args["indexUid"], "documents"), params=params))

    @registry.tool(
        "get-document",
        "Get a document by its ID from a Meilisearch index",
        schema(
            {
                "indexUid": INDEX_UID,
                "documentId": {"type": "string", "description": "ID of the document to retrieve"},
                "fields": FIELDS,
            },
            ["indexUid", "documentId"],
        ),
    )
    async def get_document(args: dict[str, Any]) -> dict[str, Any]:
        params = {"fields": join_list(args["fields"])} if "fields" in args else None
        path = index_path(args["indexUid"], "documents", quote(str(args["documentId"]), safe=""))
        return create_text_response(await client.get(path, params=params))

    @registry.tool(
        "add-documents",
        "Add documents to a Meilisearch index",
        schema(
            {
                "indexUid": INDEX_UID,
                "documents": {"description": "Array of documents to add (a JSON string is also accepted)"},
                "primaryKey": {"type": "string", "description": "Primary key for the documents"},
            },
            ["indexUid", "documents"],
        ),
    )
    async def add_documents(args: dict[str, Any]) -> dict[str, Any]:
        documents = _document_list(args["documents"], "documents")
        return create_text_response(
            await client.post(index_path(args["indexUid"], "documents"), documents, params=pick(args, "primaryKey"))
        )

    @registry.tool(
        "update-documents",
        "Add or update documents in a Meilisearch index",
        schema(
            {
                "indexUid": INDEX_UID,
                "documents": {"description": "Array of documents to update (a JSON string is also accepted)"},
                "primaryKey": {"type": "string", "description": "Primary key for the documents"},
            },
            ["indexUid", "documents"],
        ),
    )
    async def update_documents(args: dict[str, Any]) -> dict[str, Any]:
        documents = _document_list(args["documents"], "documents")
        return create_text_response(
            await client.put(index_path(args["indexUid"], "documents"), documents, params=pick(args, "primaryKey"))
        )

    @registry.tool(
        "delete-document",
        "Delete a document by its ID from a Meilisearch index",
        schema(
            {
                "indexUid": INDEX_UID,
                "documentId": {"type": "string", "description": "ID of the document to delete"},
            },
            ["indexUid", "documentId"],
        ),
    )
    async def delete_document(args: dict[str, Any]) -> dict[str, Any]:
        path = index_path(args["indexUid"], "documents", quote(str(args["documentId"]), safe=""))
        return create_text_response(await client.delete(path))

    @registry.tool(
        "delete-documents",
        "Delete multiple documents by their IDs from a Meilisearch index",
        schema(
            {
                "indexUid": INDEX_UID,
                "documentIds": {"description": "Array of document IDs to delete (a JSON string is also accepted)"},
            },
            ["indexUid", "documentIds"],
        ),
    )
    async def delete_documents(args: dict[str, Any]) -> dict[str, Any]:
        ids = _document_list(args["documentIds"], "documentIds")
        return create_text_response(await client.post(index_path(args["indexUid"], "documents", "delete-batch"), ids))

    @registry.tool(
        "delete-all-documents",
        "Delete all documents in a Meilisearch index",
        schema({"indexUid": INDEX_UID}, ["indexUid"]),
    )
    async def delete_all_documents(args: dict[str, Any]) -> dict[str, Any]:
        return create_text_response(await client.delete(index_path(args["indexUid"], "documents")))
