import asyncio
import json
from datetime import datetime, timedelta, timezone

import pytest

from conftest import FakeTransport, RecordingSink, make_session
from pts_gateway.core.network import SessionRegistry
from pts_gateway.core.network.liveness import LivenessState
from pts_gateway.models.wire import welcome


@pytest.mark.asyncio
async def test_send_writes_encoded_frame():
    transport = FakeTransport()
    session = make_session(transport=transport)

    assert await session.send(welcome()) is True

    frame = json.loads(transport.sent[0])
    assert frame["type"] == "Welcome"
    assert frame["packetId"] == 0


@pytest.mark.asyncio
async def test_send_after_close_is_skipped():
    transport = FakeTransport()
    session = make_session(transport=transport)
    await session.close(code=1000, reason="bye")

    assert await session.send(welcome()) is False
    assert transport.sent == []


@pytest.mark.asyncio
async def test_send_failure_is_reported_not_raised():
    sink = RecordingSink()
    session = make_session(transport=FakeTransport(fail_sends=True), events=sink)

    assert await session.send(welcome()) is False

    errors = sink.of_type("WebSocketError")
    assert errors and errors[0]["errorType"] == "Send"


@pytest.mark.asyncio
async def test_close_is_idempotent():
    transport = FakeTransport()
    session = make_session(transport=transport)

    await session.close(code=1000, reason="replaced")
    await session.close(code=1011, reason="other")

    assert transport.closed_with == (1000, "replaced")
    assert session.close_code == 1000
    assert session.close_reason == "replaced"


@pytest.mark.asyncio
async def test_server_requests_get_fresh_packet_ids():
    transport = FakeTransport()
    session = make_session(transport=transport)

    first, sent_first = await session.send_request("GetStatus", {"full": True})
    second, _ = await session.send_request("GetStatus")

    assert sent_first is True
    assert (first.packet_id, second.packet_id) == (1, 2)
    frame = json.loads(transport.sent[0])
    assert frame == {
        "type": "GetStatus",
        "packetId": 1,
        "data": {"full": True},
        "timestamp": frame["timestamp"],
    }


@pytest.mark.asyncio
async def test_probe_is_sent_in_background():
    transport = FakeTransport()
    session = make_session(transport=transport)

    session.send_probe()
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    frame = json.loads(transport.sent[0])
    assert frame["type"] == "Ping"
    assert frame["packetId"] == 1


@pytest.mark.asyncio
async def test_finalize_runs_once():
    sink = RecordingSink()
    registry = SessionRegistry()
    session = make_session(events=sink)
    await registry.register(session.device_id, session)
    session.mark_peer_closed(1000, "")

    assert await session.finalize() is True
    assert await session.finalize() is False

    disconnects = sink.of_type("Disconnection")
    assert len(disconnects) == 1
    assert disconnects[0]["closeCode"] == 1000
    assert disconnects[0]["closeReason"] == "peer closed"
    assert disconnects[0]["deregistered"] is True
    assert registry.lookup(session.device_id) is None


@pytest.mark.asyncio
async def test_short_connection_is_reported():
    sink = RecordingSink()
    session = make_session(events=sink)
    session.mark_inbound()

    await session.finalize()

    short = sink.of_type("ShortConnection")
    assert len(short) == 1
    assert short[0]["messageCount"] == 1


@pytest.mark.asyncio
async def test_long_connection_is_not_short():
    sink = RecordingSink()
    session = make_session(
        events=sink,
        connected_at=datetime.now(timezone.utc) - timedelta(minutes=5),
    )

    await session.finalize()

    assert sink.of_type("ShortConnection") == []
    assert sink.of_type("Disconnection")[0]["duration"] >= 300


@pytest.mark.asyncio
async def test_expire_closes_and_deregisters():
    sink = RecordingSink()
    transport = FakeTransport()
    registry = SessionRegistry()
    session = make_session(transport=transport, events=sink)
    await registry.register(session.device_id, session)
    session.liveness.tick()
    session.liveness.tick()

    await session.expire()

    assert transport.closed_with == (1001, "liveness timeout")
    assert registry.lookup(session.device_id) is None
    issue = sink.of_type("ConnectionIssue")[0]
    assert issue["issueType"] == "LIVENESS_TIMEOUT"
    disconnect = sink.of_type("Disconnection")[0]
    assert disconnect["livenessState"] == LivenessState.DEAD.value
    assert disconnect["closeCode"] == 1001


@pytest.mark.asyncio
async def test_snapshot_reflects_activity():
    session = make_session("PTS-S", firmware_version="fw", config_identifier="cfg")
    session.mark_inbound()
    session.liveness.tick()
    session.observe_liveness_reply()

    snapshot = session.snapshot()
    payload = snapshot.model_dump(by_alias=True)

    assert payload["ptsId"] == "PTS-S"
    assert payload["messageCount"] == 1
    assert payload["livenessState"] == "ALIVE"
    assert payload["lastPing"] is not None
    assert payload["client"] == "127.0.0.1:50000"
