import json

import pytest

from pts_gateway.models.wire import confirmation, error_response, welcome
from pts_gateway.protocol import FrameCodec, FrameError


def test_decode_text_frame():
    codec = FrameCodec()
    message = codec.decode('{"type":"UploadStatus","packetId":42,"data":{"systemStatus":"OK"}}')

    assert message.type == "UploadStatus"
    assert message.packet_id == 42
    assert message.data == {"systemStatus": "OK"}


def test_decode_binary_frame():
    message = FrameCodec().decode(b'{"type":"Ping","packetId":3}')

    assert message.type == "Ping"
    assert message.packet_id == 3


def test_missing_packet_id_is_uncorrelated():
    assert FrameCodec().decode('{"type":"Ping"}').packet_id == 0
    assert FrameCodec().decode('{"type":"Ping","packetId":null}').packet_id == 0


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[1, 2, 3]",
        '{"packetId": 1}',
        '{"type": 5, "packetId": 1}',
        '{"type": "Ping", "packetId": "5"}',
        '{"type": "Ping", "packetId": true}',
        '{"type": "Ping", "packetId": -1}',
        '{"type": "Ping", "packetId": 70000}',
        b"\xff\xfe",
    ],
)
def test_decode_rejects_malformed_frames(raw):
    with pytest.raises(FrameError):
        FrameCodec().decode(raw)


def test_packet_id_bound_follows_codec_limit():
    codec = FrameCodec(max_packet_id=10)

    assert codec.decode('{"type":"Ping","packetId":10}').packet_id == 10
    with pytest.raises(FrameError):
        codec.decode('{"type":"Ping","packetId":11}')


def test_frame_error_preview_is_truncated_text():
    with pytest.raises(FrameError) as excinfo:
        FrameCodec().decode(b"x" * 1000)

    preview = excinfo.value.raw_preview(limit=16)
    assert preview == "x" * 16


def test_encode_uses_wire_names_and_drops_empty_fields():
    payload = json.loads(FrameCodec.encode(confirmation(42, "PumpTransaction")))

    assert payload["type"] == "Confirmation"
    assert payload["packetId"] == 42
    assert payload["success"] is True
    assert payload["requestType"] == "PumpTransaction"
    assert "error" not in payload
    assert "data" not in payload
    assert "timestamp" in payload


def test_encode_error_and_welcome():
    error = json.loads(FrameCodec.encode(error_response(7, "Unknown message type")))
    assert error == {
        "type": "Error",
        "packetId": 7,
        "success": False,
        "error": "Unknown message type",
        "timestamp": error["timestamp"],
    }

    greeting = json.loads(FrameCodec.encode(welcome()))
    assert greeting["packetId"] == 0
    assert greeting["data"]["message"] == "PTS Controller connected successfully"


@pytest.mark.parametrize(
    "raw",
    [
        '{"type":"Ping","packetId":' + "1" * 5000 + "}",
        "[" * 100000 + "]" * 100000,
    ],
    ids=["long-integer", "deep-nesting"],
)
def test_decode_converts_parser_limits_to_frame_errors(raw):
    with pytest.raises(FrameError) as excinfo:
        FrameCodec().decode(raw)

    assert excinfo.value.reason.startswith("Unparseable JSON")
