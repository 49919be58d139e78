"""HTTP and websocket surface, driven through FastAPI's TestClient."""
import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from roomsync.app import create_app
from roomsync.config import Settings

from conftest import MEMORY_DB


def join(ws, room_name, password=None):
    """Send the opening join frame and return the server's first reply."""
    ws.send_json({"type": "join", "data": {"roomName": room_name, "password": password}})
    return ws.receive_json()


@pytest.fixture
def client():
    app = create_app(Settings(database_url=MEMORY_DB))
    with TestClient(app) as test_client:
        yield test_client


class TestRoomRoutes:
    def test_create_and_list_rooms(self, client):
        assert client.post("/rooms", json={"name": "demo"}).json() == {"roomName": "demo"}
        assert client.post("/rooms", json={"name": "secure", "password": "x123"}).status_code == 200

        rooms = client.get("/rooms").json()

        assert [room["name"] for room in rooms] == ["secure", "demo"]
        assert set(rooms[0]) == {"id", "name"}

    @pytest.mark.parametrize("body", [{}, {"name": ""}, {"password": "x"}])
    def test_create_requires_name(self, client, body):
        response = client.post("/rooms", json=body)

        assert response.status_code == 400
        assert response.json()["detail"] == "Room name is required"

    def test_create_duplicate(self, client):
        client.post("/rooms", json={"name": "demo"})

        response = client.post("/rooms", json={"name": "demo"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Room name already exists"

    def test_join_policy(self, client):
        client.post("/rooms", json={"name": "secure", "password": "x123"})

        missing = client.post("/rooms/join", json={"roomName": "secure"})
        wrong = client.post("/rooms/join", json={"roomName": "secure", "password": "wrong"})
        ok = client.post("/rooms/join", json={"roomName": "secure", "password": "x123"})

        assert (missing.status_code, missing.json()["detail"]) == (401, "Password required")
        assert (wrong.status_code, wrong.json()["detail"]) == (401, "Invalid password")
        assert ok.json() == {"success": True, "roomName": "secure"}

    def test_join_errors(self, client):
        assert client.post("/rooms/join", json={"roomName": "ghost"}).status_code == 404
        assert client.post("/rooms/join", json={}).status_code == 400

    def test_health_reports_active_rooms(self, client):
        client.post("/rooms", json={"name": "demo"})
        assert client.get("/health").json() == {"status": "ok", "activeRooms": {}}

        with client.websocket_connect("/ws") as ws:
            join(ws, "demo")
            assert client.get("/health").json()["activeRooms"] == {"demo": 1}


class TestRealtime:
    def test_two_clients_receive_updates(self, client):
        client.post("/rooms", json={"name": "demo"})

        with client.websocket_connect("/ws") as ws1, client.websocket_connect("/ws") as ws2:
            init1 = join(ws1, "demo")
            init2 = join(ws2, "demo")
            assert init1 == init2
            assert init1["type"] == "init"
            screen_id = init1["data"][0]["id"]

            ws1.send_json({
                "type": "addComponent",
                "data": {"screenId": screen_id, "component": {"id": "c1", "xRatio": 0.1, "yRatio": 0.1}},
            })

            update1 = ws1.receive_json()
            update2 = ws2.receive_json()
            assert update1 == update2
            assert update1["type"] == "updateScreens"
            assert update1["data"][0]["components"] == [{"id": "c1", "xRatio": 0.1, "yRatio": 0.1}]

    def test_password_protected_handshake(self, client):
        client.post("/rooms", json={"name": "secure", "password": "x123"})

        with client.websocket_connect("/ws") as ws:
            error = join(ws, "secure")
            assert error == {
                "type": "connect_error",
                "data": {"code": "PASSWORD_REQUIRED", "message": "Password required"},
            }
            with pytest.raises(WebSocketDisconnect) as exc_info:
                ws.receive_json()
            assert exc_info.value.code == 4001

        with client.websocket_connect("/ws") as ws:
            assert join(ws, "secure", "x123")["type"] == "init"

    def test_invalid_event_gets_error(self, client):
        client.post("/rooms", json={"name": "demo"})

        with client.websocket_connect("/ws") as ws:
            join(ws, "demo")
            ws.send_json({"type": "renameScreen", "data": {"newName": "No id"}})

            error = ws.receive_json()
            assert error["type"] == "error"
            assert error["data"]["event"] == "renameScreen"

    def test_handshake_requires_join_frame(self, client):
        client.post("/rooms", json={"name": "demo"})

        with client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "addComponent", "data": {"roomName": "demo"}})

            error = ws.receive_json()
            assert error["data"]["code"] == "VALIDATION_ERROR"
            with pytest.raises(WebSocketDisconnect) as exc_info:
                ws.receive_json()
            assert exc_info.value.code == 4000

    def test_credentials_in_url_are_ignored(self, client):
        client.post("/rooms", json={"name": "secure", "password": "x123"})

        with client.websocket_connect("/ws?roomName=secure&password=x123") as ws:
            error = join(ws, "secure")
            assert error["data"]["code"] == "PASSWORD_REQUIRED"

    def test_oversized_screen_id_keeps_connection_open(self, client):
        client.post("/rooms", json={"name": "demo"})

        with client.websocket_connect("/ws") as ws:
            screen_id = join(ws, "demo")["data"][0]["id"]
            ws.send_json({"type": "renameScreen", "data": {"screenId": 2**70, "newName": "x"}})

            error = ws.receive_json()
            assert error["type"] == "error"
            assert error["data"]["detail"] == "Invalid payload"

            ws.send_json({"type": "renameScreen", "data": {"screenId": screen_id, "newName": "Home"}})
            assert ws.receive_json()["data"][0]["name"] == "Home"
