"""Tests for meilisearch_mcp.core.router - the AI tool router."""

from __future__ import annotations

import json

import pytest

from meilisearch_mcp.core.exceptions import RouteError
from meilisearch_mcp.core.registry import CORE_CATEGORY, ToolDescriptor, ToolRegistry
from meilisearch_mcp.core.response import create_text_response
from meilisearch_mcp.core.router import (
    BACKEND_UNAVAILABLE,
    CANNOT_FULFILL,
    MALFORMED_MODEL_OUTPUT,
    MISSING_REQUIRED_PARAMETERS,
    NO_SUITABLE_TOOL,
    AIRouteDecision,
    AIToolRouter,
    extract_tool_names,
)


async def _noop(args):
    return create_text_response("ok")


@pytest.fixture
def registry() -> ToolRegistry:
    reg = ToolRegistry()
    reg.register(
        ToolDescriptor(
            name="search",
            description="Search for documents in a Meilisearch index",
            handler=_noop,
            parameter_schema={
                "type": "object",
                "properties": {"q": {"type": "string"}, "indexUid": {"type": "string"}, "limit": {"type": "integer"}},
                "required": ["q"],
            },
        )
    )
    reg.register(ToolDescriptor(name="list-indexes", description="List all indexes", handler=_noop))
    reg.register(
        ToolDescriptor(
            name="get-index",
            description="Get information about a specific index",
            handler=_noop,
            parameter_schema={"type": "object", "properties": {"indexUid": {"type": "string"}}, "required": ["indexUid"]},
        )
    )
    reg.register(
        ToolDescriptor(
            name="process-ai-query",
            description="Route a natural language query",
            handler=_noop,
            category=CORE_CATEGORY,
        )
    )
    return reg


def _system_prompt(backend) -> str:
    return backend.calls[-1][0]["content"]


class TestRouteScenario:
    """End-to-end routing with a scripted model."""

    @pytest.mark.asyncio
    async def test_search_query_selects_search(self, registry, scripted_backend):
        reply = (
            "```json\n"
            '{"name": "search", "reasoning": "The user wants to search movies", '
            '"parameters": {"q": "space", "indexUid": null}}\n'
            "```"
        )
        backend = scripted_backend(reply)
        router = AIToolRouter(registry, backend)

        decision = await router.route("search movies about space")

        assert decision.tool_name == "search"
        assert decision.parameters == {"q": "space"}
        assert decision.reasoning == "The user wants to search movies"
        assert not decision.is_sentinel
        assert decision.to_dict() == {
            "toolName": "search",
            "reasoning": "The user wants to search movies",
            "parameters": {"q": "space"},
        }

    @pytest.mark.asyncio
    async def test_no_matching_tool_returns_sentinel(self, registry, scripted_backend):
        backend = scripted_backend(
            json.dumps(
                {
                    "name": CANNOT_FULFILL,
                    "parameters": {"reason_code": NO_SUITABLE_TOOL, "message": "No tool books flights"},
                }
            )
        )
        router = AIToolRouter(registry, backend)

        decision = await router.route("book me a flight to Lisbon")

        assert decision.is_sentinel
        assert decision.tool_name == CANNOT_FULFILL
        assert decision.reason_code == NO_SUITABLE_TOOL
        assert decision.message == "No tool books flights"
        assert decision.reasoning

    @pytest.mark.asyncio
    async def test_query_is_user_message(self, registry, scripted_backend):
        backend = scripted_backend('{"name": "list-indexes", "parameters": {}}')
        router = AIToolRouter(registry, backend)

        await router.route("what indexes exist?")

        messages = backend.calls[0]
        assert messages[0]["role"] == "system"
        assert messages[1] == {"role": "user", "content": "what indexes exist?"}


class TestCandidates:
    """Tests for candidate selection and the prompt contents."""

    @pytest.mark.asyncio
    async def test_core_tools_never_offered(self, registry, scripted_backend):
        backend = scripted_backend('{"name": "list-indexes", "parameters": {}}')
        router = AIToolRouter(registry, backend)

        await router.route("show me everything")

        prompt = _system_prompt(backend)
        assert '"name": "search"' in prompt
        assert "process-ai-query" not in prompt
        assert "MCP_TOOLS" not in prompt

    @pytest.mark.asyncio
    async def test_explicit_candidates_restrict_prompt(self, registry, scripted_backend):
        backend = scripted_backend('{"name": "get-index", "parameters": {"indexUid": "movies"}}')
        router = AIToolRouter(registry, backend)

        decision = await router.route("describe movies", ["get-index"])

        assert decision.tool_name == "get-index"
        prompt = _system_prompt(backend)
        assert '"name": "get-index"' in prompt
        assert '"name": "search"' not in prompt

    def test_mentioned_tool_names_narrow_candidates(self, registry):
        router = AIToolRouter(registry, None)

        names = [t.name for t in router.candidates("please run GET-INDEX on movies")]

        assert names == ["get-index"]

    def test_no_mention_offers_all_routable(self, registry):
        router = AIToolRouter(registry, None)

        names = [t.name for t in router.candidates("tell me about my data")]

        assert names == ["search", "list-indexes", "get-index"]

    def test_empty_candidate_list_means_no_restriction(self, registry):
        router = AIToolRouter(registry, None)

        names = [t.name for t in router.candidates("find x", [])]

        assert names == ["search", "list-indexes", "get-index"]

    def test_extract_tool_names_whole_words(self, registry):
        tools = registry.candidates()

        assert extract_tool_names("use search now", tools) == ["search"]
        assert extract_tool_names("researching things", tools) == []


class TestParseReply:
    """Tests for AIToolRouter.parse_reply()."""

    def test_null_parameters_stripped(self, registry):
        router = AIToolRouter(registry, None)

        decision = router.parse_reply('{"name": "search", "parameters": {"limit": null, "q": "x"}}', {"search"})

        assert decision.parameters == {"q": "x"}

    def test_tool_name_key_accepted(self, registry):
        router = AIToolRouter(registry, None)

        decision = router.parse_reply('{"toolName": "search", "parameters": {"q": "x"}}', {"search"})

        assert decision.tool_name == "search"

    def test_reasoning_defaults_to_raw_reply(self, registry):
        router = AIToolRouter(registry, None)
        reply = '{"name": "list-indexes", "parameters": {}}'

        decision = router.parse_reply(reply, {"list-indexes"})

        assert decision.reasoning == reply

    def test_missing_parameters_carried(self, registry):
        router = AIToolRouter(registry, None)
        reply = json.dumps(
            {
                "name": CANNOT_FULFILL,
                "parameters": {
                    "reason_code": MISSING_REQUIRED_PARAMETERS,
                    "message": "Which index?",
                    "missing_parameters": ["indexUid"],
                },
            }
        )

        decision = router.parse_reply(reply, {"get-index"})

        assert decision.reason_code == MISSING_REQUIRED_PARAMETERS
        assert decision.missing_parameters == ["indexUid"]

    def test_unknown_reason_code_normalized(self, registry):
        router = AIToolRouter(registry, None)
        reply = json.dumps({"name": CANNOT_FULFILL, "parameters": {"reason_code": "I_AM_CONFUSED"}})

        decision = router.parse_reply(reply, {"search"})

        assert decision.reason_code == NO_SUITABLE_TOOL

    def test_unknown_tool_becomes_sentinel(self, registry):
        router = AIToolRouter(registry, None)

        decision = router.parse_reply('{"name": "drop-database", "parameters": {}}', {"search"})

        assert decision.is_sentinel
        assert decision.reason_code == NO_SUITABLE_TOOL
        assert "drop-database" in decision.message

    def test_tool_outside_candidates_becomes_sentinel(self, registry):
        router = AIToolRouter(registry, None)

        decision = router.parse_reply('{"name": "search", "parameters": {"q": "x"}}', {"list-indexes"})

        assert decision.is_sentinel

    @pytest.mark.parametrize(
        "reply",
        [
            "Sure! I would use the search tool.",
            '["search"]',
            '{"parameters": {"q": "x"}}',
            '{"name": "search", "parameters": "q=x"}',
        ],
    )
    def test_malformed_output_raises(self, registry, reply):
        router = AIToolRouter(registry, None)

        with pytest.raises(RouteError) as exc_info:
            router.parse_reply(reply, {"search"})

        assert exc_info.value.reason_code == MALFORMED_MODEL_OUTPUT
        assert exc_info.value.to_dict()["error"] == CANNOT_FULFILL


class TestBackendFailures:
    """Backend problems surface as BACKEND_UNAVAILABLE."""

    @pytest.mark.asyncio
    async def test_no_backend(self, registry):
        router = AIToolRouter(registry, None)

        with pytest.raises(RouteError) as exc_info:
            await router.route("search movies")

        assert exc_info.value.reason_code == BACKEND_UNAVAILABLE
        assert not router.available

    @pytest.mark.asyncio
    async def test_backend_exception(self, registry, scripted_backend):
        router = AIToolRouter(registry, scripted_backend(ConnectionError("connection refused")))

        with pytest.raises(RouteError) as exc_info:
            await router.route("search movies")

        assert exc_info.value.reason_code == BACKEND_UNAVAILABLE
        assert "connection refused" in exc_info.value.message


class TestAIRouteDecision:
    """Tests for the decision value type."""

    def test_cannot_fulfill_factory(self):
        decision = AIRouteDecision.cannot_fulfill(MISSING_REQUIRED_PARAMETERS, "Need q", missing_parameters=["q"])

        assert decision.tool_name == CANNOT_FULFILL
        assert decision.parameters == {
            "reason_code": MISSING_REQUIRED_PARAMETERS,
            "message": "Need q",
            "missing_parameters": ["q"],
        }
        assert decision.reasoning == "Need q"

    def test_regular_decision_has_no_reason(self):
        decision = AIRouteDecision(tool_name="search", parameters={"q": "x"})

        assert decision.reason_code is None
        assert decision.message is None
        assert decision.missing_parameters == []
