# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""AI tools: natural-language routing and summarization.

Both tools are in the ``core`` category, so the router never offers them to
the model as candidates.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from ..core.registry import CORE_CATEGORY, ToolRegistry
from ..core.response import create_text_response, err, ok, response_text
from ..core.router import AIToolRouter
from ..core.summarizer import Summarizer
from ._utils import schema

logger = logging.getLogger(__name__)


def _decode(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def register_ai_tools(registry: ToolRegistry, router: AIToolRouter, summarizer: Summarizer) -> None:
    @registry.tool(
        "process-ai-query",
        "Process a natural language query using AI to determine which tool to use",
        schema(
            {
                "query": {"type": "string", "description": "The natural language query to process"},
                "specificTools": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Optional array of specific tool names to consider",
                },
                "execute": {
                    "type": "boolean",
                    "description": "Run the selected tool and return its result (default: false)",
                },
                "summarize": {
                    "type": "boolean",
                    "description": "Summarize the executed tool's result with AI (requires execute)",
                },
            },
            ["query"],
        ),
        category=CORE_CATEGORY,
    )
    async def process_ai_query(args: dict[str, Any]) -> dict[str, Any]:
        decision = await router.route(args["query"], args.get("specificTools"))

        if decision.is_sentinel or not args.get("execute", False):
            return create_text_response(decision.to_dict())

        logger.info(f"Executing AI-selected tool {decision.tool_name}")
        result = await registry.call(decision.tool_name, decision.parameters)
        text = response_text(result)

        if result.get("isError"):
            failed = err(text, tool_used=decision.tool_name, reasoning=decision.reasoning)
            return {**create_text_response(failed.to_dict()), "isError": True}

        data: Any = _decode(text)
        if args.get("summarize", False):
            data = await summarizer.summarize(text)

        succeeded = ok(data, tool_used=decision.tool_name, reasoning=decision.reasoning)
        return create_text_response(succeeded.to_dict())

    @registry.tool(
        "summarize-text",
        "Summarize a text or JSON payload as HTML in the language of the input",
        schema({"text": {"type": "string", "description": "The text to summarize"}}, ["text"]),
        category=CORE_CATEGORY,
    )
    async def summarize_text(args: dict[str, Any]) -> dict[str, Any]:
        return create_text_response(await summarizer.summarize(args["text"]))
