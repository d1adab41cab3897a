"""Controller connection server: handshake, receive loop and teardown."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Optional

from fastapi import WebSocket

from pts_gateway.config.settings import GatewaySettings, get_settings
from pts_gateway.core.biz.dispatcher import MessageDispatcher
from pts_gateway.core.biz.handlers import StaticTagBalanceProvider
from pts_gateway.events import EventRecorder, EventType, event_sink
from pts_gateway.models.wire import welcome
from pts_gateway.protocol import FrameCodec

from .liveness import LivenessState
from .registry import SessionRegistry
from .session import (
    CLOSE_INTERNAL_ERROR,
    CLOSE_POLICY_VIOLATION,
    DeviceSession,
)
from .transport import BaseTransport, TransportClosed, WebSocketTransport

LOGGER = logging.getLogger(__name__)

PTS_ID_HEADER = "x-pts-id"
FIRMWARE_VERSION_HEADER = "x-pts-firmware-version-datetime"
CONFIG_IDENTIFIER_HEADER = "x-pts-configuration-identifier"

MISSING_ID_REASON = "Missing PTS ID"
MAX_CONSECUTIVE_TRANSPORT_ERRORS = 5


class GatewayServer:
    """Accepts controller channels and runs one receive loop per session."""

    def __init__(
        self,
        *,
        registry: SessionRegistry,
        settings: Optional[GatewaySettings] = None,
        dispatcher: Optional[MessageDispatcher] = None,
        events: Optional[EventRecorder] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._registry = registry
        self._events = events if events is not None else event_sink
        self._dispatcher = dispatcher or MessageDispatcher(
            codec=FrameCodec(max_packet_id=self._settings.max_packet_id),
            tag_balance_provider=StaticTagBalanceProvider(
                balance=self._settings.default_tag_balance,
                card_type=self._settings.default_tag_card_type,
            ),
        )

    @property
    def registry(self) -> SessionRegistry:
        return self._registry

    @property
    def dispatcher(self) -> MessageDispatcher:
        return self._dispatcher

    async def handle_websocket(self, websocket: WebSocket) -> None:
        transport = WebSocketTransport(websocket)
        await transport.accept()
        session = await self.open_session(transport)
        if session is None:
            return
        await self.serve(session)

    async def open_session(self, transport: BaseTransport) -> Optional[DeviceSession]:
        """Build a session from handshake headers, or reject the channel."""

        headers = transport.headers
        device_id = (headers.get(PTS_ID_HEADER) or "").strip()
        rejection = self._check_identity(device_id)
        if rejection is not None:
            LOGGER.error("Connection rejected from %s: %s", transport.client, rejection)
            self._events.record(
                EventType.CONNECTION_ISSUE,
                device_id or None,
                {
                    "issueType": "HANDSHAKE_REJECTED",
                    "severity": "WARNING",
                    "details": {"reason": rejection, "client": str(transport.client)},
                },
            )
            await transport.close(code=CLOSE_POLICY_VIOLATION, reason=rejection)
            return None
        return DeviceSession(
            device_id=device_id,
            transport=transport,
            codec=self._dispatcher.codec,
            events=self._events,
            firmware_version=headers.get(FIRMWARE_VERSION_HEADER),
            config_identifier=headers.get(CONFIG_IDENTIFIER_HEADER),
            heartbeat_interval=self._settings.heartbeat_interval_seconds,
            short_connection_threshold=self._settings.short_connection_threshold_seconds,
        )

    async def serve(self, session: DeviceSession) -> None:
        superseded = await self._registry.register(session.device_id, session)
        if superseded is not None:
            LOGGER.info("Session for %s superseded a previous connection", session.device_id)
        LOGGER.info(
            "PTS controller %s connected (firmware=%s, config=%s)",
            session.device_id,
            session.firmware_version,
            session.config_identifier,
        )
        self._events.record(
            EventType.CONNECTION,
            session.device_id,
            {
                "firmwareVersion": session.firmware_version,
                "configIdentifier": session.config_identifier,
                "client": session.client,
                "replacedPrevious": superseded is not None,
            },
            session.connected_at,
        )

        liveness_task = asyncio.create_task(
            session.liveness.run(probe=session.send_probe, on_dead=session.expire),
            name=f"liveness-{session.device_id}",
        )
        try:
            await session.send(welcome())
            await self._receive_loop(session)
        except Exception:  # noqa: BLE001
            LOGGER.exception("Connection for %s encountered an error; closing", session.device_id)
            await session.close(code=CLOSE_INTERNAL_ERROR, reason="internal error")
        finally:
            if session.liveness.state == LivenessState.DEAD:
                with contextlib.suppress(asyncio.CancelledError):
                    await liveness_task
            else:
                liveness_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await liveness_task
            await session.close()
            await session.finalize()

    def _check_identity(self, device_id: str) -> Optional[str]:
        if not device_id:
            return MISSING_ID_REASON
        limit = self._settings.max_device_id_length
        if limit and len(device_id) > limit:
            return f"PTS ID exceeds {limit} characters"
        return None

    async def _receive_loop(self, session: DeviceSession) -> None:
        transport_errors = 0
        while not session.closed:
            try:
                raw = await session.transport.receive()
            except TransportClosed as exc:
                session.mark_peer_closed(exc.code, exc.reason)
                return
            except Exception as exc:  # noqa: BLE001
                transport_errors += 1
                LOGGER.warning("Transport error for %s: %s", session.device_id, exc)
                self._events.record(
                    EventType.WEBSOCKET_ERROR,
                    session.device_id,
                    {
                        "errorType": "Receive",
                        "errorCode": type(exc).__name__,
                        "errorMessage": str(exc),
                        "consecutive": transport_errors,
                    },
                )
                if transport_errors >= MAX_CONSECUTIVE_TRANSPORT_ERRORS:
                    raise
                continue
            transport_errors = 0
            if raw is None:
                self._events.record(
                    EventType.PROTOCOL_VIOLATION,
                    session.device_id,
                    {
                        "violationType": "EMPTY_FRAME",
                        "severity": "WARNING",
                        "details": "frame carried neither text nor binary data",
                    },
                )
                continue
            await self._dispatcher.dispatch(session, raw)
