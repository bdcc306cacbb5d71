"""Stdio entry point for the Meilisearch MCP tools."""

from .server import create_server, run

__all__ = ["create_server", "run"]
