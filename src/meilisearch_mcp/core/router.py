# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""AI tool router: natural-language intent to a single tool invocation.

The router asks a language model to choose one registered tool and fill in its
parameters. It only decides; invoking the chosen tool is the caller's job.

Outcomes:
    - A decision naming a registered tool.
    - A ``cannot_fulfill_request`` decision carrying one of the model-level
      reason codes (``NO_SUITABLE_TOOL``, ``MISSING_REQUIRED_PARAMETERS``,
      ``AMBIGUOUS_PARAMETER_VALUE``, ``INVALID_PARAMETER_VALUE``,
      ``POLICY_VIOLATION``).
    - :class:`RouteError` with ``MALFORMED_MODEL_OUTPUT`` when the reply holds
      no recoverable JSON, or ``BACKEND_UNAVAILABLE`` when the model could not
      be reached.

Usage::

    router = AIToolRouter(registry, backend)
    decision = await router.route("search movies about space")
    if not decision.is_sentinel:
        result = await registry.call(decision.tool_name, decision.parameters)
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from .backends import Backend
from .exceptions import RouteError
from .prompts import render_tool_prompt
from .recovery import markdown_to_json, strip_nulls
from .registry import ToolDescriptor, ToolRegistry

logger = logging.getLogger(__name__)

CANNOT_FULFILL = "cannot_fulfill_request"

# Reported by the model
MISSING_REQUIRED_PARAMETERS = "MISSING_REQUIRED_PARAMETERS"
NO_SUITABLE_TOOL = "NO_SUITABLE_TOOL"
AMBIGUOUS_PARAMETER_VALUE = "AMBIGUOUS_PARAMETER_VALUE"
INVALID_PARAMETER_VALUE = "INVALID_PARAMETER_VALUE"
POLICY_VIOLATION = "POLICY_VIOLATION"

# Raised by the router
MALFORMED_MODEL_OUTPUT = "MALFORMED_MODEL_OUTPUT"
BACKEND_UNAVAILABLE = "BACKEND_UNAVAILABLE"

MODEL_REASON_CODES = frozenset(
    {
        MISSING_REQUIRED_PARAMETERS,
        NO_SUITABLE_TOOL,
        AMBIGUOUS_PARAMETER_VALUE,
        INVALID_PARAMETER_VALUE,
        POLICY_VIOLATION,
    }
)


@dataclass
class AIRouteDecision:
    """The router's answer for one query.

    Attributes:
        tool_name:   A registered tool name, or ``cannot_fulfill_request``.
        parameters:  Tool arguments with null members removed. For sentinel
                     decisions: ``reason_code``, ``message`` and, for missing
                     parameters, ``missing_parameters``.
        reasoning:   The model's own ``reasoning`` field when it gave one,
                     else the raw reply text.
    """

    tool_name: str
    parameters: dict[str, Any] = field(default_factory=dict)
    reasoning: str = ""

    @property
    def is_sentinel(self) -> bool:
        return self.tool_name == CANNOT_FULFILL

    @property
    def reason_code(self) -> str | None:
        if not self.is_sentinel:
            return None
        return self.parameters.get("reason_code", NO_SUITABLE_TOOL)

    @property
    def message(self) -> str | None:
        if not self.is_sentinel:
            return None
        return self.parameters.get("message", "")

    @property
    def missing_parameters(self) -> list[str]:
        if not self.is_sentinel:
            return []
        missing = self.parameters.get("missing_parameters") or []
        return [str(p) for p in missing] if isinstance(missing, list) else [str(missing)]

    @classmethod
    def cannot_fulfill(
        cls,
        reason_code: str,
        message: str,
        reasoning: str = "",
        missing_parameters: list[str] | None = None,
    ) -> AIRouteDecision:
        parameters: dict[str, Any] = {"reason_code": reason_code, "message": message}
        if missing_parameters:
            parameters["missing_parameters"] = missing_parameters
        return cls(tool_name=CANNOT_FULFILL, parameters=parameters, reasoning=reasoning or message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "toolName": self.tool_name,
            "reasoning": self.reasoning,
            "parameters": self.parameters,
        }


def extract_tool_names(query: str, tools: Sequence[ToolDescriptor]) -> list[str]:
    """Names of tools mentioned verbatim (whole word, any case) in *query*."""
    mentioned = []
    for tool in tools:
        if re.search(rf"\b{re.escape(tool.name)}\b", query, re.IGNORECASE):
            mentioned.append(tool.name)
    return mentioned


class AIToolRouter:
    """Maps free text to an :class:`AIRouteDecision` using a language model.

    The candidate snapshot is taken from the registry on every call, so tools
    registered after construction are seen.
    """

    def __init__(self, registry: ToolRegistry, backend: Backend | None):
        self.registry = registry
        self.backend = backend

    @property
    def available(self) -> bool:
        return self.backend is not None

    def candidates(self, query: str, candidate_tool_names: Sequence[str] | None = None) -> list[ToolDescriptor]:
        routable = self.registry.candidates()
        if candidate_tool_names:
            wanted = set(candidate_tool_names)
            return [t for t in routable if t.name in wanted]
        mentioned = extract_tool_names(query, routable)
        if mentioned:
            return [t for t in routable if t.name in mentioned]
        return routable

    def build_messages(self, query: str, tools: Sequence[ToolDescriptor]) -> list[dict[str, str]]:
        tools_json = json.dumps([t.to_ai_definition() for t in tools], indent=2)
        return [
            {"role": "system", "content": render_tool_prompt(tools_json)},
            {"role": "user", "content": query},
        ]

    async def route(self, query: str, candidate_tool_names: Sequence[str] | None = None) -> AIRouteDecision:
        """Pick a tool for *query*.

        Args:
            query: Natural-language request.
            candidate_tool_names: Optional restriction of the routable tools.

        Returns:
            The decision. Model-reported refusals are decisions too.

        Raises:
            RouteError: ``BACKEND_UNAVAILABLE`` or ``MALFORMED_MODEL_OUTPUT``.
        """
        if self.backend is None:
            raise RouteError(BACKEND_UNAVAILABLE, "No AI provider is configured")

        tools = self.candidates(query, candidate_tool_names)
        messages = self.build_messages(query, tools)
        logger.debug(f"Routing query over {len(tools)} candidate tool(s)")

        try:
            reply = await self.backend(messages)
        except Exception as exc:  # noqa: BLE001
            logger.warning(f"AI backend call failed: {exc}")
            raise RouteError(BACKEND_UNAVAILABLE, f"AI backend call failed: {exc}") from exc

        return self.parse_reply(reply, {t.name for t in tools})

    def parse_reply(self, reply: str, allowed: set[str]) -> AIRouteDecision:
        """Turn a raw model reply into a decision."""
        parsed = markdown_to_json(reply)
        if not isinstance(parsed, dict):
            raise RouteError(
                MALFORMED_MODEL_OUTPUT,
                "The AI response did not contain a valid JSON object",
                raw_output=reply,
            )

        name = parsed.get("name") or parsed.get("toolName")
        parameters = parsed.get("parameters")
        if parameters is None:
            parameters = {}
        if not isinstance(name, str) or not isinstance(parameters, dict):
            raise RouteError(
                MALFORMED_MODEL_OUTPUT,
                "The AI response is missing a tool name or a parameters object",
                raw_output=reply,
            )

        own_reasoning = parsed.get("reasoning")
        reasoning = own_reasoning if isinstance(own_reasoning, str) and own_reasoning else reply
        parameters = strip_nulls(parameters)

        if name == CANNOT_FULFILL:
            code = parameters.get("reason_code")
            if code not in MODEL_REASON_CODES:
                parameters["reason_code"] = NO_SUITABLE_TOOL
            return AIRouteDecision(tool_name=CANNOT_FULFILL, parameters=parameters, reasoning=reasoning)

        if name not in allowed:
            logger.info(f"AI chose unknown or excluded tool {name!r}")
            return AIRouteDecision.cannot_fulfill(
                NO_SUITABLE_TOOL,
                f"The AI selected a tool that is not available: {name}",
                reasoning=reasoning,
            )

        return AIRouteDecision(tool_name=name, parameters=parameters, reasoning=reasoning)
