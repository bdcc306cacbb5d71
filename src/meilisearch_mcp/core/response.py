# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Response envelope for tool results.

Every tool handler returns an MCP tool result dict of the form
``{"content": [{"type": "text", "text": ...}]}``; failures additionally carry
``"isError": True``. ``create_error_response`` is the single place where an
exception becomes user-visible text.

Usage::

    from meilisearch_mcp.core.response import create_text_response, create_error_response

    try:
        data = await client.get("/indexes")
        return create_text_response(data)
    except Exception as exc:
        return create_error_response(exc)
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from .exceptions import MeiliMCPException, MeilisearchAPIError, RouteError


@dataclass
class ToolResult:
    """Outcome of a tool invocation as seen by the AI wrapping.

    Attributes:
        success:    True when the tool completed without error.
        data:       Payload on success.
        error:      Human-readable error message on failure.
        tool_used:  Name of the tool the router picked (AI execution only).
        reasoning:  The router's reasoning (AI execution only).
    """

    success: bool
    data: Any = None
    error: str | None = None
    tool_used: str | None = None
    reasoning: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a plain dict, omitting keys that carry no information."""
        d: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            d["data"] = self.data
        if self.error:
            d["error"] = self.error
        if self.tool_used:
            d["toolUsed"] = self.tool_used
        if self.reasoning:
            d["reasoning"] = self.reasoning
        return d


def ok(data: Any = None, tool_used: str | None = None, reasoning: str | None = None) -> ToolResult:
    """Create a successful ToolResult."""
    return ToolResult(success=True, data=data, tool_used=tool_used, reasoning=reasoning)


def err(error: str, tool_used: str | None = None, reasoning: str | None = None) -> ToolResult:
    """Create a failed ToolResult."""
    return ToolResult(success=False, error=error, tool_used=tool_used, reasoning=reasoning)


def format_error(error: BaseException | str) -> str:
    """Render an error as the text shown to MCP clients.

    - REST failures: ``Meilisearch API error (<status>): <json body>``
    - Router failures: the JSON object with ``reason_code``
    - Everything else: the raw message
    """
    if isinstance(error, MeilisearchAPIError):
        return f"Meilisearch API error ({error.status_code}): {json.dumps(error.body)}"
    if isinstance(error, RouteError):
        return json.dumps(error.to_dict())
    if isinstance(error, MeiliMCPException):
        return error.message
    return str(error)


def create_error_response(error: BaseException | str) -> dict[str, Any]:
    """Build the ``isError`` tool result for any failure."""
    return {
        "isError": True,
        "content": [{"type": "text", "text": format_error(error)}],
    }


def create_text_response(data: Any) -> dict[str, Any]:
    """Build a successful tool result; non-strings are pretty-printed JSON."""
    text = data if isinstance(data, str) else json.dumps(data, indent=2, default=str)
    return {"content": [{"type": "text", "text": text}]}


def response_text(result: dict[str, Any]) -> str:
    """Concatenate the text parts of a tool result."""
    return "".join(part.get("text", "") for part in result.get("content", []) if part.get("type") == "text")
