# coding: utf-8

import importlib
import pkgutil

from fastapi import (  # noqa: F401
    APIRouter,
    Body,
    HTTPException,
    Path,
    status,
)
from pydantic import StrictStr

import pts_gateway.impl
from pts_gateway.apis.controllers_api_base import BaseControllersApi
from pts_gateway.models.api import (
    CommandRef,
    ControllerCommand,
    Error,
    ListControllersResponse,
    SessionSnapshot,
)

router = APIRouter()

ns_pkg = pts_gateway.impl
for _, name, _ in pkgutil.iter_modules(ns_pkg.__path__, ns_pkg.__name__ + "."):
    importlib.import_module(name)


@router.get(
    "/controllers",
    responses={
        200: {"model": ListControllersResponse, "description": "OK"},
    },
    tags=["Controllers"],
    summary="List connected PTS controllers",
    response_model_by_alias=True,
)
async def list_controllers() -> ListControllersResponse:
    if not BaseControllersApi.subclasses:
        raise HTTPException(status_code=500, detail="Not implemented")
    return await BaseControllersApi.subclasses[0]().list_controllers()


@router.get(
    "/controllers/{ptsId}",
    responses={
        200: {"model": SessionSnapshot, "description": "OK"},
        404: {"model": Error, "description": "Controller not connected"},
    },
    tags=["Controllers"],
    summary="Get controller session snapshot",
    response_model_by_alias=True,
)
async def get_controller(
    ptsId: StrictStr = Path(..., description=""),
) -> SessionSnapshot:
    if not BaseControllersApi.subclasses:
        raise HTTPException(status_code=500, detail="Not implemented")
    return await BaseControllersApi.subclasses[0]().get_controller(ptsId)


@router.post(
    "/controllers/{ptsId}/command",
    status_code=status.HTTP_202_ACCEPTED,
    responses={
        202: {"model": CommandRef, "description": "Accepted"},
        400: {"model": Error, "description": "Invalid input"},
        404: {"model": Error, "description": "Controller not connected"},
    },
    tags=["Controllers"],
    summary="Send a server-originated request to a controller",
    response_model_by_alias=True,
)
async def send_controller_command(
    ptsId: StrictStr = Path(..., description=""),
    controller_command: ControllerCommand = Body(..., description=""),
) -> CommandRef:
    if not BaseControllersApi.subclasses:
        raise HTTPException(status_code=500, detail="Not implemented")
    return await BaseControllersApi.subclasses[0]().send_controller_command(ptsId, controller_command)
