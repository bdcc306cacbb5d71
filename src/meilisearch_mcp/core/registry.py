# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Tool registry shared by the HTTP server, the stdio server and the AI router.

Tool groups register their descriptors once at startup; afterwards the
registry is only read. Invocation always goes through ``ToolRegistry.call`` so
argument checks, logging and error formatting happen in one place.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from mcp.types import Tool

from .exceptions import ValidationException
from .logging import tool_logger
from .recovery import strip_nulls
from .response import create_error_response

logger = logging.getLogger(__name__)

ToolHandler = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]

CORE_CATEGORY = "core"


@dataclass(frozen=True)
class ToolDescriptor:
    """A single callable tool."""

    name: str
    description: str
    handler: ToolHandler = field(compare=False, repr=False)
    parameter_schema: dict[str, Any] = field(default_factory=lambda: {"type": "object", "properties": {}})
    category: str = "meilisearch"

    @property
    def required(self) -> list[str]:
        return list(self.parameter_schema.get("required", []))

    def to_tool(self) -> Tool:
        """Convert to the MCP SDK wire type."""
        return Tool(name=self.name, description=self.description, inputSchema=self.parameter_schema)

    def to_ai_definition(self) -> dict[str, Any]:
        """The shape serialized into the router prompt."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameter_schema,
        }


class ToolRegistry:
    """Ordered, name-unique collection of tool descriptors."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolDescriptor] = {}

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def register(self, descriptor: ToolDescriptor) -> ToolDescriptor:
        if descriptor.name in self._tools:
            raise ValueError(f"Tool already registered: {descriptor.name}")
        self._tools[descriptor.name] = descriptor
        return descriptor

    def tool(
        self,
        name: str,
        description: str,
        parameters: dict[str, Any] | None = None,
        category: str = "meilisearch",
    ) -> Callable[[ToolHandler], ToolHandler]:
        """Decorator form of :meth:`register`.

        Example:
            @registry.tool("health", "Check if the Meilisearch server is healthy")
            async def health(args):
                return create_text_response(await client.get("/health"))
        """

        def decorator(handler: ToolHandler) -> ToolHandler:
            schema = parameters if parameters is not None else {"type": "object", "properties": {}}
            self.register(
                ToolDescriptor(
                    name=name,
                    description=description,
                    handler=handler,
                    parameter_schema=schema,
                    category=category,
                )
            )
            return handler

        return decorator

    def get(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)

    def names(self) -> list[str]:
        return list(self._tools)

    def list_tools(self) -> list[Tool]:
        return [d.to_tool() for d in self._tools.values()]

    def candidates(self, names: Iterable[str] | None = None) -> list[ToolDescriptor]:
        """Routable tools: everything outside the ``core`` category.

        When ``names`` is given the result is restricted to those names,
        preserving registration order.
        """
        routable = [d for d in self._tools.values() if d.category != CORE_CATEGORY]
        if names is None:
            return routable
        wanted = set(names)
        return [d for d in routable if d.name in wanted]

    async def call(self, name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
        """Invoke a tool and always return an MCP tool result.

        Failures (unknown tool, missing arguments, handler exceptions) come back
        as ``isError`` envelopes rather than being raised.
        """
        descriptor = self._tools.get(name)
        if descriptor is None:
            return create_error_response(f"Unknown tool: {name}")

        args = strip_nulls(arguments or {})
        tool_logger.log_call(name, args)
        start = time.perf_counter()
        try:
            _check_required(descriptor, args)
            result = await descriptor.handler(args)
        except ValidationException as e:
            logger.warning(f"Validation error in tool {name}: {e.message}")
            result = create_error_response(e)
        except Exception as e:
            logger.warning(f"Tool {name} failed: {e}")
            result = create_error_response(e)

        duration_ms = (time.perf_counter() - start) * 1000
        tool_logger.log_result(name, not result.get("isError", False), duration_ms)
        return result


def _check_required(descriptor: ToolDescriptor, args: dict[str, Any]) -> None:
    missing = [p for p in descriptor.required if p not in args]
    if missing:
        raise ValidationException(
            f"Missing required parameter(s) for {descriptor.name}: {', '.join(missing)}",
            field=missing[0],
        )
