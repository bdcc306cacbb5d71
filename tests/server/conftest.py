"""Server-specific test fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from meilisearch_mcp.core.registry import ToolRegistry
from meilisearch_mcp.core.response import create_text_response
from meilisearch_mcp.server.dispatcher import InboundRequest, RequestDispatcher
from meilisearch_mcp.server.protocol import MCPProtocol
from meilisearch_mcp.server.sessions import SessionStore
from meilisearch_mcp.server.transport import SessionTransport


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def initialize_message(request_id: Any = 1, protocol_version: str = "2025-03-26") -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "method": "initialize",
        "params": {
            "protocolVersion": protocol_version,
            "capabilities": {},
            "clientInfo": {"name": "test-client", "version": "1.0.0"},
        },
    }


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def init_message():
    """Factory for initialize request bodies."""
    return initialize_message


@pytest.fixture
def echo_registry() -> ToolRegistry:
    """Registry with a single echo tool."""
    registry = ToolRegistry()

    @registry.tool(
        "echo",
        "Echo the arguments back",
        {"type": "object", "properties": {"text": {"type": "string"}}, "required": ["text"]},
    )
    async def echo(args):
        return create_text_response(args["text"])

    return registry


@pytest.fixture
def protocol(echo_registry) -> MCPProtocol:
    return MCPProtocol(echo_registry, server_name="meilisearch", server_version="1.0.0", instructions="Use echo.")


@pytest.fixture
def store(clock) -> SessionStore:
    return SessionStore(transport_factory=SessionTransport, timeout=60.0, clock=clock)


@pytest.fixture
def dispatcher(store, protocol) -> RequestDispatcher:
    return RequestDispatcher(store, protocol, endpoint="/mcp")


@pytest.fixture
def make_request():
    """Factory for InboundRequest values."""

    def factory(
        method: str = "POST",
        body: Any = None,
        session_id: str | None = None,
        path: str = "/mcp",
        raw: bytes | None = None,
        headers: dict[str, str] | None = None,
    ):
        import json

        headers = {"Content-Type": "application/json", **(headers or {})}
        if session_id is not None:
            headers["Mcp-Session-Id"] = session_id
        payload = raw if raw is not None else (json.dumps(body).encode() if body is not None else b"")
        return InboundRequest(method=method, path=path, headers=headers, body=payload)

    return factory
