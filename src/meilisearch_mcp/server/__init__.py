"""Meilisearch HTTP MCP Server.

Serves the MCP protocol over HTTP with per-client sessions.

Usage:
    # Start the server
    meilisearch-mcp

    # Or with uvicorn directly
    uvicorn meilisearch_mcp.server.app:create_app --factory --port 4995
"""

from .config import ServerSettings, get_settings
from .dispatcher import DispatchResult, InboundRequest, RequestDispatcher, RequestKind
from .sessions import Session, SessionStore

__all__ = [
    "ServerSettings",
    "get_settings",
    "DispatchResult",
    "InboundRequest",
    "RequestDispatcher",
    "RequestKind",
    "Session",
    "SessionStore",
]
