"""Routes decoded controller messages through validation to their handler."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Mapping, Optional

from pydantic import BaseModel, ValidationError

from pts_gateway.core.network.session import DeviceSession
from pts_gateway.events import EventType
from pts_gateway.models import records
from pts_gateway.models.wire import (
    UNCORRELATED_PACKET_ID,
    Message,
    RequestType,
    Response,
    error_response,
)
from pts_gateway.protocol import FrameCodec, FrameError, RawFrame

from .handlers import (
    Handler,
    HandlerContext,
    StaticTagBalanceProvider,
    TagBalanceHandler,
    TagBalanceProvider,
    handle_ping,
    upload_handler,
)

LOGGER = logging.getLogger(__name__)

LIVENESS_REPLY_TYPE = "Pong"
MALFORMED_INPUT_ERROR = "Invalid message format"
UNKNOWN_TYPE_ERROR = "Unknown message type"
INTERNAL_ERROR = "Internal error"


@dataclass(frozen=True)
class Route:
    """Dispatch table entry: a shape validator paired with a handler."""

    request_type: RequestType
    contract: str
    handler: Handler
    model: Optional[type[BaseModel]] = None

    def validate(self, data: object) -> Optional[BaseModel]:
        if self.model is None:
            return None
        return self.model.model_validate(data)


def default_routes(tag_balance_provider: Optional[TagBalanceProvider] = None) -> Dict[str, Route]:
    provider = tag_balance_provider or StaticTagBalanceProvider()
    table = [
        Route(
            RequestType.UPLOAD_PUMP_TRANSACTION,
            "pump transaction",
            upload_handler("PumpTransaction"),
            records.PumpTransaction,
        ),
        Route(
            RequestType.UPLOAD_TANK_MEASUREMENT,
            "tank measurement",
            upload_handler("TankMeasurement"),
            records.TankMeasurement,
        ),
        Route(
            RequestType.UPLOAD_IN_TANK_DELIVERY,
            "in-tank delivery",
            upload_handler("InTankDelivery"),
            records.InTankDelivery,
        ),
        Route(
            RequestType.UPLOAD_GPS_RECORD,
            "GPS record",
            upload_handler("GpsRecord"),
            records.GpsRecord,
        ),
        Route(
            RequestType.UPLOAD_ALERT_RECORD,
            "alert record",
            upload_handler("AlertRecord"),
            records.AlertRecord,
        ),
        Route(
            RequestType.UPLOAD_STATUS,
            "status",
            upload_handler("Status"),
            records.StatusReport,
        ),
        Route(
            RequestType.UPLOAD_CONFIGURATION,
            "configuration",
            upload_handler("Configuration"),
            records.ConfigurationUpdate,
        ),
        Route(
            RequestType.REQUEST_TAG_BALANCE,
            "tag balance request",
            TagBalanceHandler(provider),
            records.TagBalanceRequest,
        ),
        Route(RequestType.PING, "ping", handle_ping),
    ]
    return {route.request_type.value: route for route in table}


def _failed_fields(exc: ValidationError) -> list[str]:
    fields: list[str] = []
    for error in exc.errors():
        loc = error.get("loc") or ()
        name = str(loc[0]) if loc else "data"
        if name not in fields:
            fields.append(name)
    return fields


class MessageDispatcher:
    """Decodes, validates and answers inbound frames for one session at a time.

    Callers must not dispatch concurrently for the same session; the receive
    loop awaits each dispatch before reading the next frame, which keeps
    responses in request order.
    """

    def __init__(
        self,
        *,
        codec: Optional[FrameCodec] = None,
        routes: Optional[Mapping[str, Route]] = None,
        tag_balance_provider: Optional[TagBalanceProvider] = None,
    ) -> None:
        self._codec = codec or FrameCodec()
        self._routes: Dict[str, Route] = dict(routes or default_routes(tag_balance_provider))

    @property
    def codec(self) -> FrameCodec:
        return self._codec

    @property
    def routes(self) -> Mapping[str, Route]:
        return self._routes

    async def dispatch(self, session: DeviceSession, raw: RawFrame) -> Optional[Response]:
        """Handle one inbound frame; returns the Response sent, if any."""

        received_at = datetime.now(timezone.utc)
        session.mark_inbound()

        try:
            message = self._codec.decode(raw)
        except FrameError as exc:
            LOGGER.warning("Malformed frame from %s: %s", session.device_id, exc.reason)
            session.events.record(
                EventType.MALFORMED_INPUT,
                session.device_id,
                {"reason": exc.reason, "raw": exc.raw_preview()},
                received_at,
            )
            response = error_response(UNCORRELATED_PACKET_ID, MALFORMED_INPUT_ERROR)
            await session.respond(response)
            return response

        if message.type == LIVENESS_REPLY_TYPE:
            session.observe_liveness_reply()
            return None

        response = await self._route(session, message, received_at)
        await session.respond(response)
        self._check_correlation(session, message)
        return response

    async def _route(self, session: DeviceSession, message: Message, received_at: datetime) -> Response:
        route = self._routes.get(message.type)
        if route is None:
            LOGGER.info("Unknown message type %s from %s", message.type, session.device_id)
            session.events.record(
                EventType.UNKNOWN_MESSAGE_TYPE,
                session.device_id,
                {"type": message.type, "packetId": message.packet_id, "data": message.data},
                received_at,
            )
            return error_response(message.packet_id, UNKNOWN_TYPE_ERROR)

        try:
            payload = route.validate(message.data)
        except ValidationError as exc:
            fields = _failed_fields(exc)
            reason = f"Invalid {route.contract} data ({', '.join(fields)})"
            LOGGER.info("Rejected %s from %s: %s", message.type, session.device_id, reason)
            session.events.record(
                EventType.VALIDATION_FAILURE,
                session.device_id,
                {
                    "requestType": message.type,
                    "packetId": message.packet_id,
                    "error": reason,
                    "fields": fields,
                    "data": message.data,
                },
                received_at,
            )
            return error_response(message.packet_id, reason)

        context = HandlerContext(
            session=session,
            message=message,
            request_type=route.request_type,
            payload=payload,
            received_at=received_at,
        )
        try:
            return await route.handler(context)
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception("Handler failed for %s from %s", message.type, session.device_id)
            session.events.record(
                EventType.HANDLER_ERROR,
                session.device_id,
                {
                    "requestType": message.type,
                    "packetId": message.packet_id,
                    "errorType": type(exc).__name__,
                    "errorMessage": str(exc),
                },
                received_at,
            )
            return error_response(message.packet_id, INTERNAL_ERROR)

    @staticmethod
    def _check_correlation(session: DeviceSession, message: Message) -> None:
        if message.packet_id == UNCORRELATED_PACKET_ID:
            return
        if session.last_response_packet_id == message.packet_id:
            return
        LOGGER.warning(
            "No response delivered to %s for packet %s (%s)",
            session.device_id,
            message.packet_id,
            message.type,
        )
        session.events.record(
            EventType.PROTOCOL_VIOLATION,
            session.device_id,
            {
                "violationType": "UNCORRELATED_REQUEST",
                "requestType": message.type,
                "packetId": message.packet_id,
                "severity": "WARNING",
            },
        )
