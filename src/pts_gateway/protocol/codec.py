"""Frame codec for the controller JSON protocol."""

from __future__ import annotations

import json
from typing import Any, Union

from pydantic import BaseModel, ValidationError

from pts_gateway.models.wire import Message

RawFrame = Union[str, bytes, bytearray, memoryview]


class FrameError(ValueError):
    """Raised when an inbound frame cannot be decoded into a Message."""

    def __init__(self, reason: str, *, raw: Any = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.raw = raw

    def raw_preview(self, limit: int = 256) -> str:
        raw = self.raw
        if isinstance(raw, (bytes, bytearray, memoryview)):
            raw = bytes(raw).decode("utf-8", errors="replace")
        text = "" if raw is None else str(raw)
        return text[:limit]


class FrameCodec:
    """Converts raw text/binary frames to Messages and models back to text."""

    def __init__(self, *, max_packet_id: int = 65535) -> None:
        self._max_packet_id = max_packet_id

    @property
    def max_packet_id(self) -> int:
        return self._max_packet_id

    def decode(self, raw: RawFrame) -> Message:
        text = self._as_text(raw)
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise FrameError(f"Invalid JSON: {exc.msg}", raw=raw) from exc
        except (ValueError, RecursionError) as exc:
            raise FrameError(f"Unparseable JSON: {type(exc).__name__}", raw=raw) from exc
        if not isinstance(payload, dict):
            raise FrameError("Frame must be a JSON object", raw=raw)

        message_type = payload.get("type")
        if not isinstance(message_type, str) or not message_type:
            raise FrameError("Missing message type", raw=raw)

        packet_id = payload.get("packetId", 0)
        if packet_id is None:
            packet_id = 0
        if isinstance(packet_id, bool) or not isinstance(packet_id, int):
            raise FrameError("packetId must be an integer", raw=raw)
        if not 0 <= packet_id <= self._max_packet_id:
            raise FrameError(
                f"packetId {packet_id} outside [0, {self._max_packet_id}]",
                raw=raw,
            )

        try:
            return Message.model_validate(
                {"type": message_type, "packetId": packet_id, "data": payload.get("data")}
            )
        except ValidationError as exc:
            raise FrameError("Invalid message envelope", raw=raw) from exc

    @staticmethod
    def encode(frame: BaseModel) -> str:
        data = frame.model_dump(by_alias=True, exclude_none=True, mode="json")
        return json.dumps(data, separators=(",", ":"), ensure_ascii=False)

    @staticmethod
    def _as_text(raw: RawFrame) -> str:
        if isinstance(raw, str):
            return raw
        if isinstance(raw, (bytes, bytearray, memoryview)):
            try:
                return bytes(raw).decode("utf-8")
            except UnicodeDecodeError as exc:
                raise FrameError("Binary frame is not valid UTF-8", raw=raw) from exc
        raise FrameError(f"Unsupported frame type {type(raw).__name__}", raw=raw)
