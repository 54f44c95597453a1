"""End-to-end tests for the HTTP routes and the /ws endpoint."""
import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from chatroom import ERROR_MESSAGES
from main import create_app


@pytest.fixture
def client(router):
    # Entering the client shares one event loop between all websocket sessions
    with TestClient(create_app(router)) as test_client:
        yield test_client


def send(ws, event, data=None):
    ws.send_json({"event": event, "data": data})


def receive_events(ws, count):
    frames = [ws.receive_json() for _ in range(count)]
    return [(frame["event"], frame["data"]) for frame in frames]


def register(ws, username):
    send(ws, "register_user", username)
    events = receive_events(ws, 3)
    assert [name for name, _ in events] == ["user_registered", "user_joined", "active_users"]
    return events[0][1]["userId"]


def test_root_reports_running(client):
    response = client.get("/")

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Chat server is running"
    assert body["status"] == "OK"
    assert body["timestamp"].endswith("Z")


def test_health_reports_counts(client):
    with client.websocket_connect("/ws") as ws:
        register(ws, "alice")
        send(ws, "send_message", {"content": "hi"})
        receive_events(ws, 2)

        body = client.get("/health").json()

    assert body["status"] == "healthy"
    assert body["sessions"] == 1
    assert body["messages"] == 1


def test_alice_and_bob_over_websocket(client, router):
    with client.websocket_connect("/ws") as alice:
        alice_id = register(alice, "alice")

        with client.websocket_connect("/ws") as bob:
            bob_id = register(bob, "bob")
            assert receive_events(alice, 2) == [
                ("user_joined", {"id": bob_id, "username": "bob"}),
                ("active_users", [
                    {"id": alice_id, "username": "alice", "status": "online"},
                    {"id": bob_id, "username": "bob", "status": "online"},
                ]),
            ]

            send(alice, "send_message", {"content": "hi"})
            for ws in (alice, bob):
                (event, message), typing = receive_events(ws, 2)
                assert event == "new_message"
                assert message["senderName"] == "alice"
                assert message["senderId"] == alice_id
                assert message["content"] == "hi"
                assert typing == ("typing_status", {"userId": alice_id, "isTyping": False})

        assert receive_events(alice, 2) == [
            ("user_left", bob_id),
            ("active_users", [{"id": alice_id, "username": "alice", "status": "online"}]),
        ]

    assert len(router.message_log) == 1


def test_typing_is_not_echoed_to_sender(client):
    with client.websocket_connect("/ws") as alice:
        alice_id = register(alice, "alice")
        with client.websocket_connect("/ws") as bob:
            register(bob, "bob")
            receive_events(alice, 2)

            send(alice, "typing_start")
            assert receive_events(bob, 1) == [
                ("typing_status", {"userId": alice_id, "username": "alice", "isTyping": True}),
            ]

            # The next thing alice sees is her own message, not a typing echo
            send(alice, "send_message", {"content": "done"})
            assert receive_events(alice, 1)[0][0] == "new_message"


def test_empty_username_closes_socket(client, router):
    with client.websocket_connect("/ws") as ws:
        send(ws, "register_user", "")
        assert receive_events(ws, 1) == [("system_error", ERROR_MESSAGES["invalid_username"])]

        with pytest.raises(WebSocketDisconnect) as exc_info:
            ws.receive_json()
        assert exc_info.value.code == 1008

    assert len(router.registry) == 0


def test_unregistered_send_gets_error(client, router):
    with client.websocket_connect("/ws") as ws:
        send(ws, "send_message", {"content": "hi"})
        assert receive_events(ws, 1) == [("system_error", ERROR_MESSAGES["unauthenticated"])]

        # Connection stays usable
        register(ws, "alice")

    assert len(router.message_log) == 0


def test_malformed_frames_keep_connection_open(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_text("{oops")
        assert receive_events(ws, 1) == [("system_error", ERROR_MESSAGES["invalid_json"])]

        send(ws, "shout", "hi")
        assert receive_events(ws, 1) == [("system_error", "Unknown event: shout")]

        send(ws, "send_message", "hi")
        assert receive_events(ws, 1) == [("system_error", "Invalid payload for send_message")]

        register(ws, "alice")


def test_late_joiner_gets_history(client):
    with client.websocket_connect("/ws") as alice:
        register(alice, "alice")
        for content in ("one", "two"):
            send(alice, "send_message", {"content": content})
            receive_events(alice, 2)

        with client.websocket_connect("/ws") as bob:
            send(bob, "register_user", "bob")
            event, data = receive_events(bob, 1)[0]

    assert event == "user_registered"
    assert [m["content"] for m in data["messageHistory"]] == ["one", "two"]
