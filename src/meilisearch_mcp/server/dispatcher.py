# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Request dispatcher: the per-request session state machine.

Every inbound request is classified exactly once:

    session header resolves                         -> CONTINUING
    POST, no session header, initialize body        -> INITIALIZING
    anything else                                   -> REJECTED (400)

The dispatcher knows nothing about Starlette. It consumes an
:class:`InboundRequest` and produces a :class:`DispatchResult`
(status, headers, body or stream) that a host adapter translates.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from mcp.types import InitializeRequest
from pydantic import ValidationError

from ..core.exceptions import TransportError
from ..core.logging import session_context
from . import errors
from .protocol import MCPProtocol
from .sessions import Session, SessionStore
from .transport import StreamConflictError

logger = logging.getLogger(__name__)

SESSION_HEADER = "mcp-session-id"
ALLOWED_METHODS = ("GET", "POST", "DELETE", "OPTIONS")


class RequestKind(str, Enum):
    INITIALIZING = "initializing"
    CONTINUING = "continuing"
    REJECTED = "rejected"


@dataclass
class InboundRequest:
    """Host-independent view of an HTTP request.

    Header names are matched case-insensitively.
    """

    method: str
    path: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        self.headers = {k.lower(): v for k, v in self.headers.items()}

    @property
    def session_id(self) -> str | None:
        return self.headers.get(SESSION_HEADER) or None


@dataclass
class DispatchResult:
    """Host-independent response: a JSON body, an SSE stream, or nothing."""

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    stream: AsyncIterator[str] | None = None


# =============================================================================
# HANDSHAKE DETECTION
# =============================================================================


def decode_handshake(message: Any) -> InitializeRequest | None:
    """Decode *message* as an initialize request, or None if it is not one."""
    if not isinstance(message, dict):
        return None
    try:
        return InitializeRequest.model_validate(message)
    except ValidationError:
        return None


def is_initialize_request(body: Any) -> bool:
    """True for an initialize object, or an array with any initialize element."""
    if isinstance(body, list):
        return any(decode_handshake(item) is not None for item in body)
    return decode_handshake(body) is not None


# =============================================================================
# DISPATCHER
# =============================================================================


class RequestDispatcher:
    """Drives the session store for one MCP endpoint."""

    def __init__(
        self,
        store: SessionStore,
        protocol: MCPProtocol,
        endpoint: str = "/mcp",
        allowed_origins: list[str] | None = None,
    ):
        self.store = store
        self.protocol = protocol
        self.endpoint = endpoint
        self.allowed_origins = allowed_origins if allowed_origins is not None else ["*"]

    def classify(self, request: InboundRequest, body: Any = None) -> RequestKind:
        if self.store.get(request.session_id) is not None:
            return RequestKind.CONTINUING
        if request.method == "POST" and request.session_id is None and is_initialize_request(body):
            return RequestKind.INITIALIZING
        return RequestKind.REJECTED

    def cors_headers(self, origin: str | None = None) -> dict[str, str]:
        """Preflight headers. A listed origin is echoed back; others get none."""
        headers = {
            "Access-Control-Allow-Methods": ", ".join(ALLOWED_METHODS),
            "Access-Control-Allow-Headers": f"Content-Type, Authorization, {SESSION_HEADER}",
            "Access-Control-Expose-Headers": SESSION_HEADER,
        }
        if "*" in self.allowed_origins:
            headers["Access-Control-Allow-Origin"] = "*"
            return headers
        headers["Vary"] = "Origin"
        if origin is not None and origin in self.allowed_origins:
            headers["Access-Control-Allow-Origin"] = origin
        return headers

    async def dispatch(self, request: InboundRequest) -> DispatchResult:
        if request.path.rstrip("/") != self.endpoint.rstrip("/"):
            return DispatchResult(404, body=errors.envelope(errors.NOT_FOUND))

        if request.method == "OPTIONS":
            return DispatchResult(200, headers=self.cors_headers(request.headers.get("origin")))

        if request.method not in ALLOWED_METHODS:
            return DispatchResult(
                405,
                headers={"Allow": ", ".join(ALLOWED_METHODS)},
                body=errors.envelope(errors.METHOD_NOT_ALLOWED),
            )

        body: Any = None
        if request.method == "POST":
            try:
                body = json.loads(request.body)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                logger.warning(f"MCP parse error: {e}")
                return DispatchResult(400, body=errors.envelope(errors.INVALID_JSON))

        kind = self.classify(request, body)

        if kind is RequestKind.REJECTED:
            message = (
                errors.INVALID_SESSION_OR_NOT_INITIALIZE if request.method == "POST" else errors.INVALID_SESSION
            )
            return DispatchResult(400, body=errors.bad_request(message))

        if kind is RequestKind.INITIALIZING:
            return await self._initialize(body)

        session = self.store.get(request.session_id)
        if session is None:
            return DispatchResult(400, body=errors.bad_request(errors.INVALID_SESSION))

        with session_context(session.id):
            if request.method == "POST":
                return await self._continue_post(session, body)
            if request.method == "GET":
                return self._open_stream(session)
            return self._close(session)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    async def _initialize(self, body: Any) -> DispatchResult:
        session = self.store.create()
        with session_context(session.id):
            return await self._handshake(session, body)

    async def _handshake(self, session: Session, body: Any) -> DispatchResult:
        transport = session.transport
        transport.bind(self.protocol)

        try:
            payload = await transport.handle_message(body)
            if not transport.initialized:
                raise TransportError("Initialize request was not accepted", session_id=session.id)
            transport.notify("notifications/tools/list_changed")
        except Exception as exc:  # Intentionally broad: roll back the half-made session
            self.store.remove(session.id)
            logger.warning(f"Session initialization failed: {exc}")
            return DispatchResult(500, body=errors.internal_error(exc))

        logger.info(f"New session {session.id} ({len(self.store)} active)")
        return DispatchResult(
            200,
            headers={
                SESSION_HEADER: session.id,
                "Access-Control-Expose-Headers": SESSION_HEADER,
            },
            body=payload,
        )

    async def _continue_post(self, session: Session, body: Any) -> DispatchResult:
        try:
            payload = await session.transport.handle_message(body)
        except TransportError as exc:
            self.store.remove(session.id)
            return DispatchResult(500, body=errors.internal_error(exc))
        except Exception as exc:  # Intentionally broad: keep the session, report the failure
            return DispatchResult(500, body=errors.internal_error(exc))

        self.store.touch(session.id)
        headers = {SESSION_HEADER: session.id}
        if payload is None:
            return DispatchResult(202, headers=headers)
        return DispatchResult(200, headers=headers, body=payload)

    def _open_stream(self, session: Session) -> DispatchResult:
        transport = session.transport
        try:
            stream = transport.open_stream()
        except StreamConflictError:
            return DispatchResult(409, body=errors.envelope(errors.STREAM_CONFLICT))
        except TransportError as exc:
            self.store.remove(session.id)
            return DispatchResult(500, body=errors.internal_error(exc))

        transport.notify(
            "notifications/message",
            {"level": "info", "data": "HTTP Connection established"},
        )
        self.store.touch(session.id)
        return DispatchResult(
            200,
            headers={
                SESSION_HEADER: session.id,
                "Cache-Control": "no-cache",
            },
            stream=stream,
        )

    def _close(self, session: Session) -> DispatchResult:
        self.store.remove(session.id)
        logger.info(f"Session {session.id} closed by client ({len(self.store)} active)")
        return DispatchResult(204)
