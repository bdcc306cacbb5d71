"""Global test fixtures for the Meilisearch MCP test suite."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from meilisearch_mcp.core.meilisearch import MeilisearchClient

# ============================================================================
# Fake Meilisearch
# ============================================================================


class FakeMeilisearch:
    """In-memory stand-in for the Meilisearch REST API.

    Routes map ``(METHOD, path)`` to ``(status, body)``. A callable body is
    called with the request. Unknown routes answer 404 the way Meilisearch does.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], tuple[int, Any]] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, body: Any = None, status: int = 200) -> None:
        self.routes[(method.upper(), path)] = (status, body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(
                404,
                json={"message": f"Route {request.url.path} not found", "code": "not_found", "type": "invalid_request"},
            )
        status, body = self.routes[key]
        if callable(body):
            body = body(request)
        if isinstance(body, httpx.Response):
            return body
        return httpx.Response(status, json=body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last.content) if self.last.content else None

    def paths(self, method: str | None = None) -> list[str]:
        return [r.url.path for r in self.requests if method is None or r.method == method]


@pytest.fixture
def meili() -> FakeMeilisearch:
    """Fake Meilisearch server with no routes configured."""
    return FakeMeilisearch()


@pytest.fixture
def meili_client(meili) -> MeilisearchClient:
    """Meilisearch client wired to the fake server."""
    return MeilisearchClient(
        host="http://meili.test",
        api_key="masterKey",
        timeout=2.0,
        transport=httpx.MockTransport(meili.handler),
    )


# ============================================================================
# Scripted language-model backend
# ============================================================================


class ScriptedBackend:
    """Backend returning canned replies in order; the last reply repeats.

    A reply may be a string, an exception to raise, or a callable taking the
    messages and returning a string.
    """

    def __init__(self, *replies: Any) -> None:
        self.replies = list(replies)
        self.calls: list[list[dict[str, str]]] = []

    async def __call__(self, messages: list[dict[str, str]]) -> str:
        self.calls.append(messages)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, BaseException):
            raise reply
        if callable(reply):
            reply = reply(messages)
            if isinstance(reply, BaseException):
                raise reply
        return reply


@pytest.fixture
def scripted_backend() -> Callable[..., ScriptedBackend]:
    """Factory for scripted backends."""
    return ScriptedBackend


# ============================================================================
# Settings isolation
# ============================================================================


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Reset cached settings and drop provider env vars between tests."""
    import meilisearch_mcp.core.config as core_config
    import meilisearch_mcp.server.config as server_config

    for var in (
        "MEILISEARCH_HOST",
        "MEILISEARCH_API_KEY",
        "AI_PROVIDER_NAME",
        "AI_PROVIDER_API_KEY",
        "AI_PROVIDER_BASE_URL",
        "LLM_MODEL",
    ):
        monkeypatch.delenv(var, raising=False)

    core_config._config = None
    server_config._settings = None
    yield
    core_config._config = None
    server_config._settings = None
