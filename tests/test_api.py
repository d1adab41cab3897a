import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from pts_gateway.app import app


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def test_health(client: TestClient):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert isinstance(body["connectedControllers"], int)
    assert "timestamp" in body


def test_unknown_controller(client: TestClient):
    response = client.get("/controllers/NOPE")

    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "not_found"


def test_command_to_unknown_controller(client: TestClient):
    response = client.post("/controllers/NOPE/command", json={"command": "GetStatus"})

    assert response.status_code == 404


def test_command_requires_a_type(client: TestClient):
    response = client.post("/controllers/NOPE/command", json={"command": "  "})

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "bad_request"


def test_logs_listing_and_validation(client: TestClient):
    listing = client.get("/logs")
    assert listing.status_code == 200
    assert "logDirectory" in listing.json()

    assert client.get("/logs/summary").status_code == 200
    assert client.get("/logs/Connection", params={"limit": 5}).json()["messageType"] == "Connection"
    assert client.get("/logs/Bad-Type").status_code == 400


def test_controller_round_trip(client: TestClient):
    headers = {
        "x-pts-id": "PTS-API-1",
        "x-pts-firmware-version-datetime": "2024-01-15T10:00:00",
        "x-pts-configuration-identifier": "cfg-1",
    }
    with client.websocket_connect("/ptsWebSocket", headers=headers) as ws:
        greeting = ws.receive_json()
        assert greeting["type"] == "Welcome"
        assert greeting["packetId"] == 0

        ws.send_json(
            {
                "type": "UploadPumpTransaction",
                "packetId": 42,
                "data": {"pumpId": 1, "nozzleId": 1, "fuelType": "A95", "volume": 10.0, "amount": 20.0},
            }
        )
        reply = ws.receive_json()
        assert reply["type"] == "Confirmation"
        assert reply["packetId"] == 42

        listing = client.get("/controllers").json()
        ids = [controller["ptsId"] for controller in listing["controllers"]]
        assert "PTS-API-1" in ids
        snapshot = client.get("/controllers/PTS-API-1").json()
        assert snapshot["firmwareVersion"] == "2024-01-15T10:00:00"
        assert snapshot["messageCount"] == 1

        accepted = client.post(
            "/controllers/PTS-API-1/command",
            json={"command": "GetConfiguration", "data": {"section": "pumps"}},
        )
        assert accepted.status_code == 202
        request = accepted.json()["request"]
        assert request["type"] == "GetConfiguration"
        assert request["packetId"] >= 1

        pushed = ws.receive_json()
        assert pushed["type"] == "GetConfiguration"
        assert pushed["packetId"] == request["packetId"]
        assert pushed["data"] == {"section": "pumps"}


def test_connection_without_identity_is_closed(client: TestClient):
    with pytest.raises(WebSocketDisconnect) as excinfo:
        with client.websocket_connect("/ptsWebSocket") as ws:
            ws.receive_text()

    assert excinfo.value.code == 1008
