"""Public exports for gateway models."""

from __future__ import annotations

from pts_gateway.models.wire import (
    Message,
    RequestType,
    Response,
    ResponseType,
    UNCORRELATED_PACKET_ID,
)

__all__ = [
    "Message",
    "RequestType",
    "Response",
    "ResponseType",
    "UNCORRELATED_PACKET_ID",
]
