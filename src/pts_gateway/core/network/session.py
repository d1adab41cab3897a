"""Device session: one controller identity bound to one active channel."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from fastapi import WebSocketDisconnect
from pydantic import BaseModel
from websockets.exceptions import ConnectionClosedError, ConnectionClosedOK

from pts_gateway.events import EventRecorder, EventType
from pts_gateway.models.api import SessionSnapshot
from pts_gateway.models.wire import Message, RequestType, Response
from pts_gateway.protocol import FrameCodec, PacketIdAllocator

from .liveness import LivenessState, LivenessTracker
from .transport import BaseTransport

if TYPE_CHECKING:
    from .registry import SessionRegistry

LOGGER = logging.getLogger(__name__)

CLOSE_NORMAL = 1000
CLOSE_GOING_AWAY = 1001
CLOSE_POLICY_VIOLATION = 1008
CLOSE_INTERNAL_ERROR = 1011

REASON_REPLACED = "replaced"
REASON_LIVENESS_TIMEOUT = "liveness timeout"
REASON_PEER_CLOSED = "peer closed"
REASON_SERVER_SHUTDOWN = "server shutdown"

_SEND_ERRORS = (
    WebSocketDisconnect,
    ConnectionClosedOK,
    ConnectionClosedError,
    RuntimeError,
    OSError,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(eq=False)
class DeviceSession:
    device_id: str
    transport: BaseTransport
    codec: FrameCodec
    events: EventRecorder
    firmware_version: Optional[str] = None
    config_identifier: Optional[str] = None
    heartbeat_interval: float = 30.0
    short_connection_threshold: float = 5.0
    connected_at: datetime = field(default_factory=_utcnow)
    last_inbound_at: Optional[datetime] = None
    inbound_message_count: int = 0
    registry: Optional[SessionRegistry] = field(default=None, repr=False)
    liveness: LivenessTracker = field(init=False)
    packet_ids: PacketIdAllocator = field(init=False)
    close_code: Optional[int] = None
    close_reason: Optional[str] = None
    last_response_packet_id: Optional[int] = field(default=None, repr=False)
    _closed: bool = field(default=False, init=False, repr=False)
    _finalized: bool = field(default=False, init=False, repr=False)
    _send_lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)
    _background: set[asyncio.Task[Any]] = field(default_factory=set, init=False, repr=False)

    def __post_init__(self) -> None:
        self.liveness = LivenessTracker(interval=self.heartbeat_interval)
        self.packet_ids = PacketIdAllocator(max_packet_id=self.codec.max_packet_id)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def client(self) -> Optional[str]:
        client = self.transport.client
        if client is None:
            return None
        host = getattr(client, "host", None)
        port = getattr(client, "port", None)
        if host is None:
            return str(client)
        return f"{host}:{port}" if port is not None else str(host)

    def duration_seconds(self, now: Optional[datetime] = None) -> float:
        return max(0.0, ((now or _utcnow()) - self.connected_at).total_seconds())

    def mark_inbound(self) -> None:
        self.inbound_message_count += 1
        self.last_inbound_at = _utcnow()
        self.last_response_packet_id = None

    def observe_liveness_reply(self) -> None:
        self.liveness.observe_reply()

    async def send(self, frame: BaseModel) -> bool:
        """Encode and write one frame; returns False when the channel is gone."""

        if self._closed:
            LOGGER.debug("Send skipped for %s: session closed", self.device_id)
            return False
        text = self.codec.encode(frame)
        async with self._send_lock:
            try:
                await self.transport.send_text(text)
            except _SEND_ERRORS as exc:
                LOGGER.debug("Send to %s failed: %s", self.device_id, exc)
                self.events.record(
                    EventType.WEBSOCKET_ERROR,
                    self.device_id,
                    {
                        "errorType": "Send",
                        "errorCode": type(exc).__name__,
                        "errorMessage": str(exc),
                    },
                )
                return False
        return True

    async def respond(self, response: Response) -> bool:
        sent = await self.send(response)
        if sent:
            self.last_response_packet_id = response.packet_id
        return sent

    async def send_request(self, message_type: str, data: Optional[dict[str, Any]] = None) -> tuple[Message, bool]:
        message = Message(
            type=message_type,
            packet_id=self.packet_ids.next(),
            data=data or {},
            timestamp=_utcnow(),
        )
        sent = await self.send(message)
        return message, sent

    def send_probe(self) -> None:
        """Queue a liveness probe without waiting on the channel."""

        message = Message(type=RequestType.PING.value, packet_id=self.packet_ids.next(), timestamp=_utcnow())
        self._spawn(self.send(message), name=f"probe-{self.device_id}")

    async def close(self, *, code: int = CLOSE_NORMAL, reason: str = "") -> None:
        """Close the channel; safe to call repeatedly and from any close path."""

        if self._closed:
            return
        self._closed = True
        self.close_code = code
        self.close_reason = reason
        try:
            await self.transport.close(code=code, reason=reason)
        except _SEND_ERRORS as exc:
            LOGGER.debug("Close for %s raised: %s", self.device_id, exc)

    def mark_peer_closed(self, code: Optional[int], reason: str = "") -> None:
        if self._closed:
            return
        self._closed = True
        self.close_code = code
        self.close_reason = reason or REASON_PEER_CLOSED

    async def expire(self) -> None:
        """Liveness timeout: close the channel and tear the session down."""

        if self._closed:
            await self.finalize()
            return
        duration = self.duration_seconds()
        LOGGER.warning(
            "Terminating inactive connection for %s after %.1fs (%d messages)",
            self.device_id,
            duration,
            self.inbound_message_count,
        )
        self.events.record(
            EventType.CONNECTION_ISSUE,
            self.device_id,
            {
                "issueType": "LIVENESS_TIMEOUT",
                "severity": "WARNING",
                "details": {
                    "duration": round(duration, 3),
                    "messageCount": self.inbound_message_count,
                    "heartbeatInterval": self.heartbeat_interval,
                    "lastProbeAt": self.liveness.last_probe_at,
                    "lastReplyAt": self.liveness.last_reply_at,
                },
            },
        )
        await self.close(code=CLOSE_GOING_AWAY, reason=REASON_LIVENESS_TIMEOUT)
        await self.finalize()

    async def finalize(self) -> bool:
        """Deregister and emit the disconnect report exactly once."""

        if self._finalized:
            return False
        self._finalized = True
        self._closed = True
        for task in list(self._background):
            task.cancel()
        removed = False
        if self.registry is not None:
            removed = await self.registry.unregister(self.device_id, self)
        duration = self.duration_seconds()
        LOGGER.info(
            "PTS controller %s disconnected after %.1fs (code=%s, reason=%s, deregistered=%s)",
            self.device_id,
            duration,
            self.close_code,
            self.close_reason or "none",
            removed,
        )
        self.events.record(
            EventType.DISCONNECTION,
            self.device_id,
            {
                "duration": round(duration, 3),
                "messageCount": self.inbound_message_count,
                "closeCode": self.close_code,
                "closeReason": self.close_reason,
                "firmwareVersion": self.firmware_version,
                "configIdentifier": self.config_identifier,
                "livenessState": self.liveness.state.value,
                "deregistered": removed,
            },
        )
        if duration < self.short_connection_threshold:
            self.events.record(
                EventType.SHORT_CONNECTION,
                self.device_id,
                {
                    "duration": round(duration, 3),
                    "messageCount": self.inbound_message_count,
                    "closeCode": self.close_code,
                    "closeReason": self.close_reason,
                    "severity": "WARNING",
                },
            )
        return removed

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            device_id=self.device_id,
            firmware_version=self.firmware_version,
            config_identifier=self.config_identifier,
            client=self.client,
            liveness_state=self.liveness.state.value,
            is_alive=self.liveness.state != LivenessState.DEAD,
            connected_at=self.connected_at,
            last_inbound_at=self.last_inbound_at,
            last_probe_reply_at=self.liveness.last_reply_at,
            inbound_message_count=self.inbound_message_count,
        )

    def _spawn(self, coro: Any, *, name: str) -> None:
        task = asyncio.create_task(coro, name=name)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
