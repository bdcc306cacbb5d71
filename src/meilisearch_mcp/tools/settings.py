# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Index settings tools.

Besides the whole-settings ``get-settings`` / ``update-settings`` /
``reset-settings``, every individual setting gets a ``get-``, ``update-`` and
``reset-`` tool generated from :data:`SETTINGS`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..core.exceptions import ValidationException
from ..core.meilisearch import MeilisearchClient
from ..core.registry import ToolDescriptor, ToolHandler, ToolRegistry
from ..core.response import create_text_response
from ._utils import INDEX_UID, coerce_json, index_path, schema


@dataclass(frozen=True)
class SettingSpec:
    """One Meilisearch index setting."""

    path: str  # kebab-case route segment, also the tool name suffix
    param: str  # camelCase argument name
    label: str
    example: str
    update_method: str = "PUT"


SETTINGS: tuple[SettingSpec, ...] = (
    SettingSpec("displayed-attributes", "displayedAttributes", "displayed attributes", '["title", "description"]'),
    SettingSpec("filterable-attributes", "filterableAttributes", "filterable attributes", '["genre", "director"]'),
    SettingSpec("sortable-attributes", "sortableAttributes", "sortable attributes", '["price", "date"]'),
    SettingSpec("searchable-attributes", "searchableAttributes", "searchable attributes", '["title", "description"]'),
    SettingSpec("ranking-rules", "rankingRules", "ranking rules", '["words", "typo", "proximity", "attribute", "sort", "exactness"]'),
    SettingSpec("stop-words", "stopWords", "stop words", '["the", "a", "an"]'),
    SettingSpec("synonyms", "synonyms", "synonyms", '{"phone": ["smartphone", "cellphone"]}'),
    SettingSpec("typo-tolerance", "typoTolerance", "typo tolerance", '{"enabled": true, "minWordSizeForTypos": {"oneTypo": 5}}', "PATCH"),
    SettingSpec("pagination", "pagination", "pagination", '{"maxTotalHits": 1000}', "PATCH"),
    SettingSpec("faceting", "faceting", "faceting", '{"maxValuesPerFacet": 100}', "PATCH"),
    SettingSpec("distinct-attribute", "distinctAttribute", "distinct attribute", '"product_id"'),
    SettingSpec("proximity-precision", "proximityPrecision", "proximity precision", '"byWord" or "byAttribute"'),
    SettingSpec("dictionary", "dictionary", "dictionary", '["J. R. R.", "W. E. B."]'),
    SettingSpec("separator-tokens", "separatorTokens", "separator tokens", '["|", "&hellip;"]'),
    SettingSpec("non-separator-tokens", "nonSeparatorTokens", "non-separator tokens", '["@", "#"]'),
)


def _getter(client: MeilisearchClient, spec: SettingSpec) -> ToolHandler:
    async def handler(args: dict[str, Any]) -> dict[str, Any]:
        return create_text_response(await client.get(index_path(args["indexUid"], "settings", spec.path)))

    return handler


def _updater(client: MeilisearchClient, spec: SettingSpec) -> ToolHandler:
    async def handler(args: dict[str, Any]) -> dict[str, Any]:
        value = coerce_json(args[spec.param], spec.param)
        path = index_path(args["indexUid"], "settings", spec.path)
        return create_text_response(await client.request(spec.update_method, path, body=value))

    return handler


def _resetter(client: MeilisearchClient, spec: SettingSpec) -> ToolHandler:
    async def handler(args: dict[str, Any]) -> dict[str, Any]:
        return create_text_response(await client.delete(index_path(args["indexUid"], "settings", spec.path)))

    return handler


def register_settings_tools(registry: ToolRegistry, client: MeilisearchClient) -> None:
    @registry.tool(
        "get-settings",
        "Get all settings for a Meilisearch index",
        schema({"indexUid": INDEX_UID}, ["indexUid"]),
    )
    async def get_settings(args: dict[str, Any]) -> dict[str, Any]:
        return create_text_response(await client.get(index_path(args["indexUid"], "settings")))

    @registry.tool(
        "update-settings",
        "Update all settings for a Meilisearch index",
        schema(
            {
                "indexUid": INDEX_UID,
                "settings": {"description": "Object containing settings to update (a JSON string is also accepted)"},
            },
            ["indexUid", "settings"],
        ),
    )
    async def update_settings(args: dict[str, Any]) -> dict[str, Any]:
        settings = coerce_json(args["settings"], "settings")
        if not isinstance(settings, dict):
            raise ValidationException("Settings must be a JSON object", field="settings")
        return create_text_response(await client.patch(index_path(args["indexUid"], "settings"), settings))

    @registry.tool(
        "reset-settings",
        "Reset all settings for a Meilisearch index to their default values",
        schema({"indexUid": INDEX_UID}, ["indexUid"]),
    )
    async def reset_settings(args: dict[str, Any]) -> dict[str, Any]:
        return create_text_response(await client.delete(index_path(args["indexUid"], "settings")))

    for spec in SETTINGS:
        index_only = schema({"indexUid": INDEX_UID}, ["indexUid"])
        registry.register(
            ToolDescriptor(
                name=f"get-{spec.path}",
                description=f"Get the {spec.label} setting for a Meilisearch index",
                handler=_getter(client, spec),
                parameter_schema=index_only,
            )
        )
        registry.register(
            ToolDescriptor(
                name=f"update-{spec.path}",
                description=f"Update the {spec.label} setting for a Meilisearch index",
                handler=_updater(client, spec),
                parameter_schema=schema(
                    {
                        "indexUid": INDEX_UID,
                        spec.param: {"description": f"New {spec.label} value, e.g. {spec.example}"},
                    },
                    ["indexUid", spec.param],
                ),
            )
        )
        registry.register(
            ToolDescriptor(
                name=f"reset-{spec.path}",
                description=f"Reset the {spec.label} setting to its default value",
                handler=_resetter(client, spec),
                parameter_schema=index_only,
            )
        )
