"""Test configuration and fixtures."""
import pytest

from chatroom import EventRouter


class FakeConnection:
    """In-memory stand-in for WebSocketConnection that records what it is sent."""

    def __init__(self, connection_id: str):
        self.connection_id = connection_id
        self.ip_address = "127.0.0.1"
        self.sent = []
        self.close_requested = False
        self.close_code = None

    def send(self, event, data=None):
        if self.close_requested:
            return
        self.sent.append((event, data))

    def close(self, code=1008, reason=""):
        self.close_requested = True
        self.close_code = code

    def events(self, name):
        """Payloads of every received event with the given name, in order."""
        return [data for event, data in self.sent if event == name]

    def names(self):
        return [event for event, _ in self.sent]

    def clear(self):
        self.sent.clear()


@pytest.fixture
def router():
    return EventRouter()


@pytest.fixture
def make_connection():
    def _make(connection_id):
        return FakeConnection(connection_id)
    return _make
