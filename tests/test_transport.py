"""Tests for the queued WebSocket connection writer."""
import json

import pytest

from chatroom import WebSocketConnection


class RecordingSocket:
    """Minimal WebSocket double that records frames and close calls."""

    client = None

    def __init__(self, fail_sends=False):
        self.fail_sends = fail_sends
        self.frames = []
        self.closed_with = None

    async def send_text(self, text):
        if self.fail_sends:
            raise RuntimeError("socket gone")
        self.frames.append(json.loads(text))

    async def close(self, code=1000, reason=""):
        self.closed_with = (code, reason)


@pytest.mark.asyncio
async def test_writer_sends_in_order_then_closes():
    socket = RecordingSocket()
    connection = WebSocketConnection(socket, connection_id="A")

    connection.send("system_error", "Username cannot be empty.")
    connection.send("user_left", "B")
    connection.close(1008, "Username cannot be empty.")
    connection.send("user_joined", {"id": "C", "username": "carol"})
    await connection.run_writer()

    assert socket.frames == [
        {"event": "system_error", "data": "Username cannot be empty."},
        {"event": "user_left", "data": "B"},
    ]
    assert socket.closed_with == (1008, "Username cannot be empty.")
    assert connection.ip_address == "unknown"


@pytest.mark.asyncio
async def test_writer_returns_on_stop_without_closing():
    socket = RecordingSocket()
    connection = WebSocketConnection(socket, connection_id="A")

    connection.send("user_left", "B")
    connection.stop()
    await connection.run_writer()

    assert socket.frames == [{"event": "user_left", "data": "B"}]
    assert socket.closed_with is None


@pytest.mark.asyncio
async def test_failed_send_stops_queueing():
    socket = RecordingSocket(fail_sends=True)
    connection = WebSocketConnection(socket, connection_id="A")

    connection.send("user_joined", {"id": "B", "username": "bob"})
    await connection.run_writer()

    for index in range(5):
        connection.send("new_message", {"content": str(index)})

    assert connection._outbox.empty()
