# coding: utf-8

import importlib
import pkgutil

from fastapi import APIRouter, HTTPException  # noqa: F401

import pts_gateway.impl
from pts_gateway.apis.health_api_base import BaseHealthApi
from pts_gateway.models.api import HealthResponse

router = APIRouter()

ns_pkg = pts_gateway.impl
for _, name, _ in pkgutil.iter_modules(ns_pkg.__path__, ns_pkg.__name__ + "."):
    importlib.import_module(name)


@router.get(
    "/health",
    responses={
        200: {"model": HealthResponse, "description": "OK"},
    },
    tags=["Health"],
    summary="Gateway health and connected controller count",
    response_model_by_alias=True,
)
async def get_health() -> HealthResponse:
    if not BaseHealthApi.subclasses:
        raise HTTPException(status_code=500, detail="Not implemented")
    return await BaseHealthApi.subclasses[0]().get_health()
