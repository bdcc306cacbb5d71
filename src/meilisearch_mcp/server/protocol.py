# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""MCP JSON-RPC 2.0 method handling for one session transport."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from mcp.shared.version import SUPPORTED_PROTOCOL_VERSIONS
from mcp.types import LATEST_PROTOCOL_VERSION

from ..core.registry import ToolRegistry

if TYPE_CHECKING:
    from .transport import SessionTransport

logger = logging.getLogger(__name__)

# JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class MethodNotFoundError(Exception):
    pass


class InvalidParamsError(Exception):
    pass


class InvalidRequestError(Exception):
    pass


def rpc_error(code: int, message: str, request_id: Any = None) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "error": {"code": code, "message": message}, "id": request_id}


class MCPProtocol:
    """Answers MCP methods for the transport it is bound to.

    One instance may serve many transports; per-session state (the
    ``initialized`` flag) lives on the transport.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        server_name: str = "meilisearch",
        server_version: str = "0.0.0-dev",
        instructions: str | None = None,
    ):
        self.registry = registry
        self.server_name = server_name
        self.server_version = server_version
        self.instructions = instructions

    async def handle(self, transport: SessionTransport, request: Any) -> dict[str, Any] | None:
        """Handle a single JSON-RPC message.

        Returns:
            JSON-RPC response object, or None for notifications and client
            responses.
        """
        if not isinstance(request, dict):
            return rpc_error(INVALID_REQUEST, "Invalid Request: expected a JSON object")

        request_id = request.get("id")
        if request.get("jsonrpc") != "2.0":
            return rpc_error(INVALID_REQUEST, "Invalid request: missing or wrong jsonrpc version", request_id)

        method = request.get("method")
        if method is None and ("result" in request or "error" in request):
            # Response to a server-initiated request; nothing to answer
            return None

        # Notifications have no id
        is_notification = "id" not in request

        if not method or not isinstance(method, str):
            return rpc_error(INVALID_REQUEST, "Invalid Request: missing or invalid method", request_id)

        params = request.get("params") or {}
        if not isinstance(params, dict):
            if is_notification:
                return None
            return rpc_error(INVALID_PARAMS, "params must be an object", request_id)

        try:
            result = await self._dispatch_method(transport, method, params)
        except MethodNotFoundError as e:
            if is_notification:
                return None
            return rpc_error(METHOD_NOT_FOUND, str(e), request_id)
        except InvalidParamsError as e:
            if is_notification:
                return None
            return rpc_error(INVALID_PARAMS, str(e), request_id)
        except InvalidRequestError as e:
            if is_notification:
                return None
            return rpc_error(INVALID_REQUEST, str(e), request_id)
        except Exception:  # Intentionally broad: top-level method handler
            logger.exception(f"Error in method {method}")
            if is_notification:
                return None
            return rpc_error(INTERNAL_ERROR, "Internal error", request_id)

        if is_notification:
            return None
        return {"jsonrpc": "2.0", "result": result, "id": request_id}

    async def _dispatch_method(self, transport: SessionTransport, method: str, params: dict[str, Any]) -> Any:
        if method == "initialize":
            return self._initialize(transport, params)

        elif method in ("notifications/initialized", "initialized"):
            return {}

        elif method.startswith("notifications/"):
            # cancelled, progress, roots/list_changed: acknowledged, no state kept
            return {}

        elif method == "ping":
            return {}

        elif method == "tools/list":
            return {"tools": [tool.model_dump(exclude_none=True) for tool in self.registry.list_tools()]}

        elif method == "tools/call":
            name = params.get("name")
            if not name or not isinstance(name, str):
                raise InvalidParamsError("Missing tool name")
            arguments = params.get("arguments") or {}
            if not isinstance(arguments, dict):
                raise InvalidParamsError("arguments must be an object")
            if name not in self.registry:
                raise InvalidParamsError(f"Unknown tool: {name}")
            return await self.registry.call(name, arguments)

        raise MethodNotFoundError(f"Method not found: {method}")

    def _initialize(self, transport: SessionTransport, params: dict[str, Any]) -> dict[str, Any]:
        if transport.initialized:
            raise InvalidRequestError("Invalid Request: server already initialized")

        requested = params.get("protocolVersion")
        negotiated = requested if requested in SUPPORTED_PROTOCOL_VERSIONS else LATEST_PROTOCOL_VERSION
        transport.initialized = True
        transport.client_info = params.get("clientInfo") or {}
        logger.info(
            f"Session {transport.session_id} initialized (protocol {negotiated}, "
            f"client {transport.client_info.get('name', 'unknown')})"
        )

        result: dict[str, Any] = {
            "protocolVersion": negotiated,
            "capabilities": {"tools": {"listChanged": True}},
            "serverInfo": {"name": self.server_name, "version": self.server_version},
        }
        if self.instructions:
            result["instructions"] = self.instructions
        return result
