# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Per-session transport: command channel plus server push channel.

A ``SessionTransport`` belongs to exactly one session. POST bodies go through
:meth:`SessionTransport.handle_message`; server-initiated messages are queued
with :meth:`SessionTransport.send` and drained by the single open
:meth:`SessionTransport.open_stream` as Server-Sent Events.
"""

from __future__ import annotations

import asyncio
import json
import logging
import weakref
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ..core.exceptions import TransportClosedError, TransportError
from .protocol import INVALID_REQUEST, rpc_error

if TYPE_CHECKING:
    from .protocol import MCPProtocol

logger = logging.getLogger(__name__)

_CLOSED = object()


class StreamConflictError(TransportError):
    """A second push channel was requested for the same session."""

    pass


def sse_frame(message: dict[str, Any]) -> str:
    return f"event: message\ndata: {json.dumps(message)}\n\n"


class PushStream:
    """SSE frame iterator over a transport's queue.

    Holding a ``PushStream`` is what keeps the push channel claimed: the
    transport only keeps a weak reference, so a stream the host never
    iterates releases the channel as soon as it is garbage collected.
    """

    def __init__(self, queue: asyncio.Queue[Any]):
        self._queue = queue
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        self._released = True

    def __aiter__(self) -> PushStream:
        return self

    async def __anext__(self) -> str:
        if self._released:
            raise StopAsyncIteration
        try:
            message = await self._queue.get()
        except asyncio.CancelledError:
            self.release()
            raise
        if message is _CLOSED:
            self.release()
            raise StopAsyncIteration
        return sse_frame(message)

    async def aclose(self) -> None:
        self.release()


class SessionTransport:
    """Message pipe between one client session and the protocol handler."""

    def __init__(self, session_id: str, protocol: MCPProtocol | None = None):
        self.session_id = session_id
        self.protocol = protocol
        self.initialized = False
        self.client_info: dict[str, Any] = {}
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._closed = False
        self._stream_ref: weakref.ref[PushStream] | None = None
        self._close_callbacks: list[Callable[[SessionTransport], None]] = []

    def __repr__(self) -> str:
        return f"SessionTransport(session_id={self.session_id!r}, closed={self._closed})"

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def stream_open(self) -> bool:
        stream = self._stream_ref() if self._stream_ref is not None else None
        return stream is not None and not stream.released

    def bind(self, protocol: MCPProtocol) -> None:
        self.protocol = protocol

    def on_close(self, callback: Callable[[SessionTransport], None]) -> None:
        self._close_callbacks.append(callback)

    async def handle_message(self, body: Any) -> Any:
        """Run a decoded JSON-RPC body (single or batch) through the protocol.

        Returns:
            The response object, a list of responses for a batch, or None when
            the body held only notifications/responses.

        Raises:
            TransportClosedError: If the transport was closed.
            TransportError: If no protocol is bound.
        """
        if self._closed:
            raise TransportClosedError("Transport is closed", session_id=self.session_id)
        if self.protocol is None:
            raise TransportError("No protocol bound to transport", session_id=self.session_id)

        if isinstance(body, list):
            if not body:
                return rpc_error(INVALID_REQUEST, "Invalid Request: empty batch")
            responses = []
            for message in body:
                response = await self.protocol.handle(self, message)
                if response is not None:
                    responses.append(response)
            return responses or None

        return await self.protocol.handle(self, body)

    def send(self, message: dict[str, Any]) -> None:
        """Queue a server-initiated message for the push channel."""
        if self._closed:
            raise TransportClosedError("Transport is closed", session_id=self.session_id)
        self._queue.put_nowait(message)

    def notify(self, method: str, params: dict[str, Any] | None = None) -> None:
        message: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
        if params is not None:
            message["params"] = params
        self.send(message)

    def open_stream(self) -> PushStream:
        """Claim the push channel and return its SSE frame iterator.

        The claim lasts until the stream ends, is closed, or is dropped
        without ever being iterated.

        Raises:
            TransportClosedError: If the transport was closed.
            StreamConflictError: If a push channel is already open.
        """
        if self._closed:
            raise TransportClosedError("Transport is closed", session_id=self.session_id)
        if self.stream_open:
            raise StreamConflictError("Push channel already open", session_id=self.session_id)
        stream = PushStream(self._queue)
        self._stream_ref = weakref.ref(stream)
        return stream

    def close(self) -> None:
        """Close the transport. Idempotent; callbacks fire once."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

        callbacks, self._close_callbacks = self._close_callbacks, []
        for callback in callbacks:
            callback(self)
        logger.debug(f"Transport for session {self.session_id} closed")
