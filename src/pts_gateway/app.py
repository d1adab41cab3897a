"""ASGI application: controller WebSocket endpoint plus the admin HTTP surface."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pts_gateway import __version__
from pts_gateway.apis.controllers_api import router as controllers_router
from pts_gateway.apis.health_api import router as health_router
from pts_gateway.apis.logs_api import router as logs_router
from pts_gateway.config.settings import get_settings
from pts_gateway.core import device_registry, router as ws_router
from pts_gateway.core.network.session import REASON_SERVER_SHUTDOWN
from pts_gateway.events import event_sink

LOGGER = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(
    title="PTS Gateway",
    description="WebSocket session gateway for PTS fuel-station controllers",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(controllers_router)
app.include_router(logs_router)
app.include_router(ws_router)

_retention_task: Optional[asyncio.Task[None]] = None


async def _retention_loop() -> None:
    while True:
        try:
            await event_sink.prune(settings.log_retention_days)
        except Exception:  # noqa: BLE001
            LOGGER.exception("Event log retention sweep failed")
        await asyncio.sleep(settings.log_retention_check_seconds)


@app.on_event("startup")
async def _startup() -> None:
    global _retention_task
    event_sink.start()
    _retention_task = asyncio.create_task(_retention_loop(), name="event-log-retention")
    LOGGER.info(
        "PTS gateway ready (ws=%s, logs=%s, heartbeat=%.0fs)",
        settings.ws_path,
        settings.log_dir,
        settings.heartbeat_interval_seconds,
    )


@app.on_event("shutdown")
async def _shutdown() -> None:
    global _retention_task
    task = _retention_task
    _retention_task = None
    if task is not None:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
    await device_registry.close_all(reason=REASON_SERVER_SHUTDOWN)
    await event_sink.stop()
