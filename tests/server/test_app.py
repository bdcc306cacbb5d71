"""Tests for the Starlette application."""

from __future__ import annotations

import json

import pytest
from starlette.testclient import TestClient

from meilisearch_mcp.server.app import create_app
from meilisearch_mcp.server.config import ServerSettings

MCP = "/mcp"


@pytest.fixture
def settings() -> ServerSettings:
    return ServerSettings(
        meilisearch_host="http://meili.test",
        session_timeout=60.0,
        server_version="1.0.0",
    )


@pytest.fixture
def app(settings, meili_client, clock):
    return create_app(settings=settings, client=meili_client, backend=None, clock=clock)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app, raise_server_exceptions=False)


def _initialize(client, init_message) -> str:
    response = client.post(MCP, json=init_message())
    assert response.status_code == 200
    return response.headers["mcp-session-id"]


def _call(client, session_id, name, arguments=None, request_id=2):
    body = {"jsonrpc": "2.0", "id": request_id, "method": "tools/call", "params": {"name": name, "arguments": arguments or {}}}
    return client.post(MCP, json=body, headers={"mcp-session-id": session_id})


def _tool_text(response) -> str:
    return response.json()["result"]["content"][0]["text"]


# ============================================================================
# Health Endpoint Tests
# ============================================================================


class TestHealthEndpoint:
    def test_healthy(self, client, meili):
        meili.on("GET", "/health", {"status": "available"})

        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["meilisearch"] == "available"
        assert data["server"] == "meilisearch"
        assert data["version"] == "1.0.0"
        assert data["sessions"] == 0

    def test_degraded_when_meilisearch_fails(self, client, meili):
        meili.on("GET", "/health", {"message": "down"}, status=503)

        response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "degraded"
        assert "Meilisearch API error (503)" in response.json()["meilisearch"]


# ============================================================================
# MCP Endpoint Tests
# ============================================================================


class TestSessionFlow:
    def test_initialize_sets_and_exposes_session_header(self, client, init_message):
        response = client.post(MCP, json=init_message(), headers={"Origin": "http://agent.example"})

        assert response.status_code == 200
        assert response.headers["mcp-session-id"]
        assert "mcp-session-id" in response.headers["access-control-expose-headers"].lower()
        assert response.json()["result"]["capabilities"] == {"tools": {"listChanged": True}}

    def test_tools_list_includes_every_group(self, client, init_message):
        session_id = _initialize(client, init_message)

        response = client.post(MCP, json={"jsonrpc": "2.0", "id": 2, "method": "tools/list"}, headers={"mcp-session-id": session_id})

        names = {t["name"] for t in response.json()["result"]["tools"]}
        for expected in (
            "list-indexes",
            "add-documents",
            "search",
            "update-typo-tolerance",
            "reset-non-separator-tokens",
            "wait-for-task",
            "health",
            "process-ai-query",
            "summarize-text",
        ):
            assert expected in names

    def test_tool_call_reaches_meilisearch(self, client, meili, init_message):
        meili.on("GET", "/version", {"pkgVersion": "1.8.0", "commitSha": "abc"})
        session_id = _initialize(client, init_message)

        response = _call(client, session_id, "version")

        assert response.status_code == 200
        assert response.headers["mcp-session-id"] == session_id
        assert json.loads(_tool_text(response))["pkgVersion"] == "1.8.0"

    def test_upstream_error_in_envelope(self, client, meili, init_message):
        meili.on("GET", "/indexes/films", {"message": "Index `films` not found.", "code": "index_not_found"}, status=404)
        session_id = _initialize(client, init_message)

        response = _call(client, session_id, "get-index", {"indexUid": "films"})

        result = response.json()["result"]
        assert result["isError"] is True
        assert result["content"][0]["text"].startswith("Meilisearch API error (404): ")

    def test_ai_query_without_backend(self, client, init_message):
        session_id = _initialize(client, init_message)

        response = _call(client, session_id, "process-ai-query", {"query": "search movies about space"})

        result = response.json()["result"]
        assert result["isError"] is True
        assert json.loads(result["content"][0]["text"])["reason_code"] == "BACKEND_UNAVAILABLE"

    def test_delete_then_reuse_rejected(self, client, init_message):
        session_id = _initialize(client, init_message)

        assert client.delete(MCP, headers={"mcp-session-id": session_id}).status_code == 204

        response = client.post(MCP, json={"jsonrpc": "2.0", "id": 3, "method": "ping"}, headers={"mcp-session-id": session_id})
        assert response.status_code == 400
        assert response.json()["isError"] is True

    def test_idle_session_expires(self, app, client, clock, meili, init_message):
        meili.on("GET", "/version", {"pkgVersion": "1.8.0"})
        session_id = _initialize(client, init_message)
        clock.advance(30)
        assert _call(client, session_id, "version").status_code == 200
        assert app.state.store.get(session_id).last_activity == clock.now

        clock.advance(61)
        app.state.store.evict_expired()

        response = client.post(MCP, json={"jsonrpc": "2.0", "id": 4, "method": "ping"}, headers={"mcp-session-id": session_id})
        assert response.status_code == 400
        assert "invalid session ID" in response.json()["content"][0]["text"]


class TestHttpErrors:
    def test_not_initialize_without_session(self, client):
        response = client.post(MCP, json={"jsonrpc": "2.0", "id": 1, "method": "tools/list"})

        assert response.status_code == 400
        assert response.json() == {
            "isError": True,
            "content": [{"type": "text", "text": "Bad Request: invalid session ID or not an initialize request"}],
        }

    def test_get_without_session(self, client):
        response = client.get(MCP)

        assert response.status_code == 400
        assert response.json()["content"][0]["text"] == "Bad Request: invalid session ID"

    def test_invalid_json(self, client):
        response = client.post(MCP, content=b"{oops", headers={"Content-Type": "application/json"})

        assert response.status_code == 400

    def test_unknown_path(self, client, init_message):
        assert client.post("/elsewhere", json=init_message()).status_code == 404

    def test_method_not_allowed(self, client):
        response = client.put(MCP, json={})

        assert response.status_code == 405
        assert response.headers["allow"] == "GET, POST, DELETE, OPTIONS"

    def test_cors_preflight(self, client):
        response = client.options(
            MCP,
            headers={
                "Origin": "http://agent.example",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "mcp-session-id",
            },
        )

        assert response.status_code == 200


class TestCreateApp:
    def test_missing_ai_key_disables_ai(self, settings, meili_client):
        app = create_app(settings=settings, client=meili_client)

        assert "process-ai-query" in app.state.registry

    def test_independent_instances(self, settings, meili_client):
        first = create_app(settings=settings, client=meili_client, backend=None)
        second = create_app(settings=settings, client=meili_client, backend=None)

        assert first.state.store is not second.state.store
        assert first.state.registry is not second.state.registry

    def test_lifespan_starts_and_stops_sweep(self, app, init_message):
        with TestClient(app) as client:
            assert app.state.store.running
            _initialize(client, init_message)
            assert len(app.state.store) == 1

        assert not app.state.store.running
        assert len(app.state.store) == 0
