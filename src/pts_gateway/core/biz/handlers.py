"""Request handlers for validated controller messages."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol

from pydantic import BaseModel

from pts_gateway.core.network.session import DeviceSession
from pts_gateway.events import EventRecorder, EventType
from pts_gateway.models.records import TagBalance
from pts_gateway.models.wire import Message, RequestType, Response, ResponseType, confirmation, pong

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class DomainRecord:
    """Normalized upload: who sent it, when the server saw it, what it declared."""

    device_id: str
    received_at: datetime
    request_type: RequestType
    packet_id: int
    fields: Dict[str, Any] = field(default_factory=dict)

    def event_payload(self) -> Dict[str, Any]:
        return {"packetId": self.packet_id, **self.fields}


@dataclass
class HandlerContext:
    session: DeviceSession
    message: Message
    request_type: RequestType
    payload: Optional[BaseModel]
    received_at: datetime

    @property
    def events(self) -> EventRecorder:
        return self.session.events

    @property
    def packet_id(self) -> int:
        return self.message.packet_id

    def record(self) -> DomainRecord:
        fields: Dict[str, Any] = {}
        if self.payload is not None:
            fields = self.payload.model_dump(by_alias=True, exclude_none=True)
        return DomainRecord(
            device_id=self.session.device_id,
            received_at=self.received_at,
            request_type=self.request_type,
            packet_id=self.packet_id,
            fields=fields,
        )

    def emit(self, record: DomainRecord, **extra: Any) -> None:
        payload = record.event_payload()
        payload.update(extra)
        self.events.record(EventType(record.request_type.value), record.device_id, payload, record.received_at)


Handler = Callable[[HandlerContext], Awaitable[Response]]


class TagBalanceProvider(Protocol):
    async def lookup(self, tag_id: Any) -> TagBalance:
        ...


class StaticTagBalanceProvider:
    """Answers every tag with the same configured balance."""

    def __init__(
        self,
        *,
        balance: float = 100.50,
        card_type: Optional[str] = "FLEET",
        expiry_date: Optional[str] = None,
    ) -> None:
        self._balance = balance
        self._card_type = card_type
        self._expiry_date = expiry_date

    async def lookup(self, tag_id: Any) -> TagBalance:
        return TagBalance(
            tag_id=tag_id,
            balance=self._balance,
            is_valid=True,
            card_type=self._card_type,
            expiry_date=self._expiry_date,
        )


def upload_handler(request_name: str) -> Handler:
    """Log the normalized record and confirm with ``request_name``."""

    async def _handle(ctx: HandlerContext) -> Response:
        record = ctx.record()
        LOGGER.debug("%s from %s: %s", request_name, record.device_id, record.fields)
        ctx.emit(record)
        return confirmation(ctx.packet_id, request_name)

    _handle.__name__ = f"handle_{request_name}"
    return _handle


class TagBalanceHandler:
    def __init__(self, provider: TagBalanceProvider) -> None:
        self._provider = provider

    async def __call__(self, ctx: HandlerContext) -> Response:
        record = ctx.record()
        balance = await self._provider.lookup(record.fields.get("tagId"))
        data = balance.model_dump(by_alias=True, exclude_none=True)
        ctx.emit(record, response=data)
        return Response(
            type=ResponseType.TAG_BALANCE_RESPONSE,
            packet_id=ctx.packet_id,
            success=True,
            data=data,
        )


async def handle_ping(ctx: HandlerContext) -> Response:
    ctx.session.observe_liveness_reply()
    ctx.emit(ctx.record())
    return pong(ctx.packet_id)
