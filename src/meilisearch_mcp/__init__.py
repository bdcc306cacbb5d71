# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Meilisearch MCP server.

Exposes the Meilisearch REST API as Model Context Protocol tools over HTTP
(Streamable HTTP sessions) or stdio, plus a natural-language front-end that
maps free-text requests onto one of the registered tools.

Architecture:
  HTTP request
    → RequestDispatcher (initialize / continue / reject)
    → SessionStore (one transport per session, idle sweep)
    → MCPProtocol (JSON-RPC: initialize, tools/list, tools/call)
    → ToolRegistry → Meilisearch REST
  process-ai-query
    → AIToolRouter (language model picks a tool, defensive JSON recovery)

Entry points: ``meilisearch-mcp`` (HTTP) and ``meilisearch-mcp-stdio``.
"""

__version__ = "1.0.0"
