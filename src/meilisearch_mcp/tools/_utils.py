# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Shared helpers for Meilisearch tool handlers."""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import quote

from ..core.exceptions import ValidationException

INDEX_UID = {"type": "string", "description": "Unique identifier of the index"}


def schema(properties: dict[str, Any], required: list[str] | None = None) -> dict[str, Any]:
    """Build an object JSON Schema."""
    result: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        result["required"] = required
    return result


def index_path(index_uid: str, *parts: str) -> str:
    """``/indexes/{uid}/...`` with the uid percent-encoded."""
    path = f"/indexes/{quote(str(index_uid), safe='')}"
    for part in parts:
        path += f"/{part}"
    return path


def coerce_json(value: Any, field: str) -> Any:
    """Accept a JSON value, or a string holding a JSON object, array or string.

    Plain strings that do not start like an object or array are returned as-is,
    so ``distinctAttribute: "id"`` stays a string.
    """
    if not isinstance(value, str):
        return value
    stripped = value.strip()
    if not stripped or stripped[0] not in '[{"':
        return value
    try:
        return json.loads(stripped)
    except json.JSONDecodeError as e:
        raise ValidationException(f"{field} must be valid JSON: {e.msg}", field=field, value=value) from e


def pick(args: dict[str, Any], *names: str) -> dict[str, Any]:
    """The subset of *args* named, skipping absent ones."""
    return {name: args[name] for name in names if name in args}


def join_list(value: Any) -> Any:
    """Meilisearch query strings take comma-separated lists."""
    if isinstance(value, list):
        return ",".join(str(v) for v in value)
    return value
