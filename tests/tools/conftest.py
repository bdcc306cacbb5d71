"""Fixtures for the tool-group tests."""

from __future__ import annotations

import json
from typing import Any

import pytest

from meilisearch_mcp.core.response import response_text
from meilisearch_mcp.tools import build_registry


@pytest.fixture
def registry(meili_client):
    """Registry with every tool group and no AI backend."""
    registry, _router, _summarizer = build_registry(meili_client, backend=None)
    return registry


@pytest.fixture
def call(registry):
    """Call a tool and return ``(result, decoded_text)``."""

    async def _call(name: str, arguments: dict[str, Any] | None = None):
        result = await registry.call(name, arguments or {})
        text = response_text(result)
        try:
            return result, json.loads(text)
        except json.JSONDecodeError:
            return result, text

    return _call
