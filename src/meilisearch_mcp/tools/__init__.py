# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Tool groups exposed over MCP.

Tool list:
    indexes    list-indexes, get-index, create-index, update-index, delete-index, swap-indexes
    documents  get-documents, get-document, add-documents, update-documents,
               delete-document, delete-documents, delete-all-documents
    search     search, multi-search, global-search, facet-search
    settings   get/update/reset-settings and get-/update-/reset-<setting>
    tasks      list-tasks, get-task, cancel-tasks, delete-tasks, wait-for-task
    system     health, version, info, stats, get-index-stats
    vectors    enable-vector-search, get-experimental-features,
               get-/update-/reset-embedders, vector-search
    ai         process-ai-query, summarize-text (category "core")
"""

from __future__ import annotations

from ..core.meilisearch import MeilisearchClient
from ..core.registry import ToolRegistry
from ..core.router import AIToolRouter
from ..core.summarizer import Summarizer
from .ai import register_ai_tools
from .documents import register_document_tools
from .indexes import register_index_tools
from .search import register_search_tools
from .settings import register_settings_tools
from .system import register_system_tools
from .tasks import register_task_tools
from .vectors import register_vector_tools

__all__ = ["build_registry", "register_all_tools"]


def register_all_tools(
    registry: ToolRegistry,
    client: MeilisearchClient,
    router: AIToolRouter,
    summarizer: Summarizer,
) -> ToolRegistry:
    """Register every tool group on *registry*."""
    register_index_tools(registry, client)
    register_document_tools(registry, client)
    register_search_tools(registry, client)
    register_settings_tools(registry, client)
    register_task_tools(registry, client)
    register_system_tools(registry, client)
    register_vector_tools(registry, client)
    register_ai_tools(registry, router, summarizer)
    return registry


def build_registry(
    client: MeilisearchClient,
    backend=None,
    summary_chunk_size: int = 4000,
) -> tuple[ToolRegistry, AIToolRouter, Summarizer]:
    """Create a fully populated registry with its router and summarizer."""
    registry = ToolRegistry()
    router = AIToolRouter(registry, backend)
    summarizer = Summarizer(backend, chunk_size=summary_chunk_size)
    register_all_tools(registry, client, router, summarizer)
    return registry, router, summarizer
