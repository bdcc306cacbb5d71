# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Starlette application serving MCP over HTTP.

This module is the host adapter: it turns Starlette requests into
:class:`InboundRequest` values, hands them to the :class:`RequestDispatcher`
and turns the :class:`DispatchResult` back into a Starlette response.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from contextlib import asynccontextmanager
from typing import Any

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response, StreamingResponse
from starlette.routing import Route

from ..core.backends import Backend, create_backend
from ..core.exceptions import ConfigException, MeiliMCPException
from ..core.logging import configure_logging, request_context
from ..core.meilisearch import MeilisearchClient
from ..core.registry import ToolRegistry
from ..core.response import format_error
from ..tools import build_registry
from .config import ServerSettings, get_settings
from .dispatcher import SESSION_HEADER, DispatchResult, InboundRequest, RequestDispatcher
from .protocol import MCPProtocol
from .sessions import SessionStore
from .transport import SessionTransport

logger = logging.getLogger(__name__)

ALL_METHODS = ["GET", "POST", "DELETE", "OPTIONS", "PUT", "PATCH", "HEAD"]

SERVER_INSTRUCTIONS = (
    "Tools for a Meilisearch instance: index, document, search, settings, task and system "
    "management. Call process-ai-query with a natural-language request to let the server pick "
    "the right tool; set execute=true to run it and summarize=true for an HTML summary."
)

_UNSET: Any = object()


async def health_endpoint(request: Request) -> JSONResponse:
    """Health check endpoint: reports this server and the Meilisearch instance."""
    settings: ServerSettings = request.app.state.settings
    client: MeilisearchClient = request.app.state.client

    health_data: dict[str, Any] = {
        "status": "healthy",
        "server": settings.server_name,
        "version": settings.server_version,
        "sessions": len(request.app.state.store),
    }

    try:
        meili = await client.health()
        health_data["meilisearch"] = meili.get("status", "unknown")
    except MeiliMCPException as e:
        health_data["meilisearch"] = f"error: {format_error(e)}"
        health_data["status"] = "degraded"

    status_code = 200 if health_data["status"] == "healthy" else 503
    return JSONResponse(health_data, status_code=status_code)


def to_response(result: DispatchResult) -> Response:
    """Translate a dispatcher result into a Starlette response."""
    if result.stream is not None:
        return StreamingResponse(
            result.stream,
            status_code=result.status,
            headers=result.headers,
            media_type="text/event-stream",
        )
    if result.body is None:
        return Response(status_code=result.status, headers=result.headers)
    return JSONResponse(result.body, status_code=result.status, headers=result.headers)


async def mcp_endpoint(request: Request) -> Response:
    """Catch-all route: every path and method goes through the dispatcher."""
    dispatcher: RequestDispatcher = request.app.state.dispatcher

    with request_context(request.headers.get("x-request-id")):
        body = await request.body() if request.method == "POST" else b""
        inbound = InboundRequest(
            method=request.method,
            path=request.url.path,
            headers=dict(request.headers),
            body=body,
        )
        result = await dispatcher.dispatch(inbound)
        if result.status >= 500:
            logger.warning(f"{request.method} {request.url.path} -> {result.status}")
        else:
            logger.debug(f"{request.method} {request.url.path} -> {result.status}")
        return to_response(result)


@asynccontextmanager
async def lifespan(app: Starlette):
    """Application lifespan handler: runs the idle sweep, closes clients on exit."""
    settings: ServerSettings = app.state.settings
    logger.info(f"Starting Meilisearch MCP server on {settings.host}:{settings.port}{settings.endpoint}")
    logger.info(f"{len(app.state.registry)} tools registered, Meilisearch at {settings.meilisearch_host}")

    await app.state.store.start()

    yield

    logger.info("Meilisearch MCP server shutting down")
    await app.state.store.stop()
    await app.state.client.aclose()


def create_app(
    settings: ServerSettings | None = None,
    client: MeilisearchClient | None = None,
    backend: Backend | None = _UNSET,
    registry: ToolRegistry | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> Starlette:
    """Create the Starlette ASGI application.

    Every collaborator can be injected, so several independent apps can live
    in one process.

    Args:
        settings: Server settings (default: from the environment).
        client: Meilisearch client (default: built from settings).
        backend: Language-model backend. Default: built from settings, or no
            backend when the provider is not configured. Pass None to disable AI.
        registry: Pre-built tool registry (default: all tool groups).
        clock: Monotonic clock for session activity.
    """
    settings = settings or get_settings()
    client = client or MeilisearchClient.from_settings(settings)

    if backend is _UNSET:
        try:
            backend = create_backend(settings)
        except ConfigException as e:
            logger.warning(f"AI tools disabled: {e.message}")
            backend = None

    if registry is None:
        registry, _, _ = build_registry(client, backend, settings.summary_chunk_size)

    store = SessionStore(
        transport_factory=SessionTransport,
        timeout=settings.session_timeout,
        sweep_interval=settings.sweep_interval,
        clock=clock,
    )
    protocol = MCPProtocol(
        registry,
        server_name=settings.server_name,
        server_version=settings.server_version,
        instructions=SERVER_INSTRUCTIONS,
    )
    dispatcher = RequestDispatcher(
        store,
        protocol,
        endpoint=settings.endpoint,
        allowed_origins=settings.allowed_origins,
    )

    routes = [
        Route("/health", health_endpoint, methods=["GET"]),
        Route("/{path:path}", mcp_endpoint, methods=ALL_METHODS),
    ]

    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=settings.allowed_origins,
            allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
            allow_headers=["Authorization", "Content-Type", SESSION_HEADER],
            expose_headers=[SESSION_HEADER],
        ),
    ]

    app = Starlette(routes=routes, middleware=middleware, lifespan=lifespan)
    app.state.settings = settings
    app.state.client = client
    app.state.registry = registry
    app.state.store = store
    app.state.dispatcher = dispatcher
    return app


def run() -> None:
    """Run the server using uvicorn."""
    import uvicorn

    configure_logging()
    settings = get_settings()

    logger.info(f"Starting Meilisearch HTTP MCP server on {settings.host}:{settings.port}")

    uvicorn.run(
        "meilisearch_mcp.server.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
