"""Wire-level message models exchanged with PTS controllers."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

UNCORRELATED_PACKET_ID = 0


class RequestType(str, Enum):
    UPLOAD_PUMP_TRANSACTION = "UploadPumpTransaction"
    UPLOAD_TANK_MEASUREMENT = "UploadTankMeasurement"
    UPLOAD_IN_TANK_DELIVERY = "UploadInTankDelivery"
    UPLOAD_GPS_RECORD = "UploadGpsRecord"
    UPLOAD_ALERT_RECORD = "UploadAlertRecord"
    UPLOAD_STATUS = "UploadStatus"
    UPLOAD_CONFIGURATION = "UploadConfiguration"
    REQUEST_TAG_BALANCE = "RequestTagBalance"
    PING = "Ping"


class ResponseType(str, Enum):
    WELCOME = "Welcome"
    CONFIRMATION = "Confirmation"
    ERROR = "Error"
    PONG = "Pong"
    TAG_BALANCE_RESPONSE = "TagBalanceResponse"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Message(BaseModel):
    """Inbound request frame, or a server-originated outbound request."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str
    packet_id: int = Field(default=UNCORRELATED_PACKET_ID, alias="packetId", ge=0)
    data: Optional[Any] = None
    timestamp: Optional[datetime] = None


class Response(BaseModel):
    """Outbound reply correlated to an inbound Message by packetId."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: ResponseType
    packet_id: int = Field(alias="packetId", ge=0)
    success: bool
    request_type: Optional[str] = Field(default=None, alias="requestType")
    data: Optional[Any] = None
    error: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)


def confirmation(packet_id: int, request_type: str) -> Response:
    return Response(
        type=ResponseType.CONFIRMATION,
        packet_id=packet_id,
        success=True,
        request_type=request_type,
    )


def error_response(packet_id: int, message: str) -> Response:
    return Response(
        type=ResponseType.ERROR,
        packet_id=packet_id,
        success=False,
        error=message,
    )


def pong(packet_id: int) -> Response:
    now = _utcnow()
    return Response(
        type=ResponseType.PONG,
        packet_id=packet_id,
        success=True,
        data={"serverTime": now.isoformat()},
        timestamp=now,
    )


def welcome(message: str = "PTS Controller connected successfully") -> Response:
    return Response(
        type=ResponseType.WELCOME,
        packet_id=UNCORRELATED_PACKET_ID,
        success=True,
        data={"message": message},
    )


__all__ = [
    "Message",
    "RequestType",
    "Response",
    "ResponseType",
    "UNCORRELATED_PACKET_ID",
    "confirmation",
    "error_response",
    "pong",
    "welcome",
]
