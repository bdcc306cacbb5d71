"""Meilisearch MCP Core - shared primitives for the HTTP and stdio servers."""

from .config import CoreSettings, clear_config_cache, get_config
from .exceptions import (
    ConfigException,
    MeiliMCPException,
    MeilisearchAPIError,
    MeilisearchConnectionError,
    RouteError,
    SummarizationError,
    TransportClosedError,
    TransportError,
    ValidationException,
)
from .logging import (
    ToolCallLogger,
    configure_logging,
    request_context,
    session_context,
    tool_logger,
)
from .meilisearch import MeilisearchClient
from .registry import ToolDescriptor, ToolRegistry
from .response import ToolResult, create_error_response, create_text_response
from .router import AIRouteDecision, AIToolRouter
from .summarizer import Summarizer

__all__ = [
    # Config
    "CoreSettings",
    "get_config",
    "clear_config_cache",
    # Exceptions
    "MeiliMCPException",
    "ConfigException",
    "ValidationException",
    "MeilisearchAPIError",
    "MeilisearchConnectionError",
    "RouteError",
    "SummarizationError",
    "TransportError",
    "TransportClosedError",
    # Logging
    "configure_logging",
    "request_context",
    "session_context",
    "ToolCallLogger",
    "tool_logger",
    # Tools and AI
    "MeilisearchClient",
    "ToolDescriptor",
    "ToolRegistry",
    "ToolResult",
    "create_error_response",
    "create_text_response",
    "AIRouteDecision",
    "AIToolRouter",
    "Summarizer",
]
