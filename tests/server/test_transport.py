"""Tests for meilisearch_mcp.server.transport - per-session transports."""

from __future__ import annotations

import asyncio
import gc
import json

import pytest

from meilisearch_mcp.core.exceptions import TransportClosedError, TransportError
from meilisearch_mcp.server.transport import SessionTransport, StreamConflictError, sse_frame


def _parse_frame(frame: str) -> dict:
    event, data = frame.strip().split("\n")
    assert event == "event: message"
    return json.loads(data.removeprefix("data: "))


class TestHandleMessage:
    @pytest.mark.asyncio
    async def test_requires_protocol(self):
        transport = SessionTransport("s1")

        with pytest.raises(TransportError):
            await transport.handle_message({"jsonrpc": "2.0", "id": 1, "method": "ping"})

    @pytest.mark.asyncio
    async def test_single_message(self, protocol):
        transport = SessionTransport("s1", protocol)

        response = await transport.handle_message({"jsonrpc": "2.0", "id": 7, "method": "ping"})

        assert response == {"jsonrpc": "2.0", "result": {}, "id": 7}

    @pytest.mark.asyncio
    async def test_batch_collects_responses(self, protocol):
        transport = SessionTransport("s1", protocol)

        responses = await transport.handle_message(
            [
                {"jsonrpc": "2.0", "id": 1, "method": "ping"},
                {"jsonrpc": "2.0", "method": "notifications/initialized"},
                {"jsonrpc": "2.0", "id": 2, "method": "ping"},
            ]
        )

        assert [r["id"] for r in responses] == [1, 2]

    @pytest.mark.asyncio
    async def test_notification_only_batch_returns_none(self, protocol):
        transport = SessionTransport("s1", protocol)

        assert await transport.handle_message([{"jsonrpc": "2.0", "method": "notifications/initialized"}]) is None

    @pytest.mark.asyncio
    async def test_empty_batch_is_invalid(self, protocol):
        transport = SessionTransport("s1", protocol)

        response = await transport.handle_message([])

        assert response["error"]["code"] == -32600

    @pytest.mark.asyncio
    async def test_closed_transport_rejects(self, protocol):
        transport = SessionTransport("s1", protocol)
        transport.close()

        with pytest.raises(TransportClosedError):
            await transport.handle_message({"jsonrpc": "2.0", "id": 1, "method": "ping"})


class TestStream:
    @pytest.mark.asyncio
    async def test_queued_messages_streamed_in_order(self):
        transport = SessionTransport("s1")
        transport.notify("notifications/tools/list_changed")
        transport.notify("notifications/message", {"level": "info", "data": "hello"})

        stream = transport.open_stream()
        first = _parse_frame(await anext(stream))
        second = _parse_frame(await anext(stream))

        assert first == {"jsonrpc": "2.0", "method": "notifications/tools/list_changed"}
        assert second["params"] == {"level": "info", "data": "hello"}

    @pytest.mark.asyncio
    async def test_close_ends_stream_and_releases_channel(self):
        transport = SessionTransport("s1")
        stream = transport.open_stream()
        transport.send({"jsonrpc": "2.0", "method": "ping", "id": "srv-1"})
        transport.close()

        frames = [frame async for frame in stream]

        assert len(frames) == 1
        assert not transport.stream_open

    def test_second_stream_conflicts(self):
        transport = SessionTransport("s1")
        stream = transport.open_stream()

        with pytest.raises(StreamConflictError):
            transport.open_stream()
        assert not stream.released

    def test_unstarted_stream_dropped_releases_channel(self):
        transport = SessionTransport("s1")
        stream = transport.open_stream()
        assert transport.stream_open

        del stream
        gc.collect()

        assert not transport.stream_open
        assert transport.open_stream() is not None

    @pytest.mark.asyncio
    async def test_aclose_releases_channel(self):
        transport = SessionTransport("s1")
        stream = transport.open_stream()

        await stream.aclose()

        assert not transport.stream_open
        replacement = transport.open_stream()
        transport.notify("notifications/message", {"level": "info", "data": "again"})
        assert _parse_frame(await anext(replacement))["params"]["data"] == "again"

    @pytest.mark.asyncio
    async def test_cancelled_reader_releases_channel(self):
        transport = SessionTransport("s1")
        stream = transport.open_stream()
        reader = asyncio.ensure_future(anext(stream))
        await asyncio.sleep(0)

        reader.cancel()
        with pytest.raises(asyncio.CancelledError):
            await reader

        assert not transport.stream_open

    def test_closed_transport_has_no_stream(self):
        transport = SessionTransport("s1")
        transport.close()

        with pytest.raises(TransportClosedError):
            transport.open_stream()
        with pytest.raises(TransportClosedError):
            transport.notify("notifications/message")

    def test_sse_frame_format(self):
        assert sse_frame({"a": 1}) == 'event: message\ndata: {"a": 1}\n\n'


class TestClose:
    def test_close_is_idempotent_and_callbacks_fire_once(self):
        transport = SessionTransport("s1")
        seen = []
        transport.on_close(lambda t: seen.append(t.session_id))

        transport.close()
        transport.close()

        assert transport.closed
        assert seen == ["s1"]
