# coding: utf-8

import importlib
import pkgutil
from typing import Optional

from fastapi import (  # noqa: F401
    APIRouter,
    HTTPException,
    Path,
    Query,
)
from pydantic import Field, StrictStr
from typing_extensions import Annotated

import pts_gateway.impl
from pts_gateway.apis.logs_api_base import BaseLogsApi
from pts_gateway.models.api import (
    Error,
    LogEntriesResponse,
    LogFilesResponse,
    LogSummaryResponse,
)

router = APIRouter()

ns_pkg = pts_gateway.impl
for _, name, _ in pkgutil.iter_modules(ns_pkg.__path__, ns_pkg.__name__ + "."):
    importlib.import_module(name)


@router.get(
    "/logs",
    responses={
        200: {"model": LogFilesResponse, "description": "OK"},
    },
    tags=["Logs"],
    summary="List protocol event log files",
    response_model_by_alias=True,
)
async def list_log_files() -> LogFilesResponse:
    if not BaseLogsApi.subclasses:
        raise HTTPException(status_code=500, detail="Not implemented")
    return await BaseLogsApi.subclasses[0]().list_log_files()


@router.get(
    "/logs/summary",
    responses={
        200: {"model": LogSummaryResponse, "description": "OK"},
    },
    tags=["Logs"],
    summary="Per event type file and entry counts",
    response_model_by_alias=True,
)
async def get_log_summary() -> LogSummaryResponse:
    if not BaseLogsApi.subclasses:
        raise HTTPException(status_code=500, detail="Not implemented")
    return await BaseLogsApi.subclasses[0]().get_log_summary()


@router.get(
    "/logs/{eventType}",
    responses={
        200: {"model": LogEntriesResponse, "description": "OK"},
        400: {"model": Error, "description": "Invalid event type"},
    },
    tags=["Logs"],
    summary="Most recent entries of today's log for an event type",
    response_model_by_alias=True,
)
async def get_recent_logs(
    eventType: StrictStr = Path(..., description=""),
    limit: Optional[Annotated[int, Field(le=1000, ge=1)]] = Query(50, description="", alias="limit", ge=1, le=1000),
) -> LogEntriesResponse:
    if not BaseLogsApi.subclasses:
        raise HTTPException(status_code=500, detail="Not implemented")
    return await BaseLogsApi.subclasses[0]().get_recent_logs(eventType, limit)
