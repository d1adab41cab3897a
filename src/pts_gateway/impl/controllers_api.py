from __future__ import annotations

from pts_gateway.apis.controllers_api_base import BaseControllersApi
from pts_gateway.core.network import DeviceGateway, DeviceNotFound, device_gateway
from pts_gateway.http.errors import bad_request, not_found
from pts_gateway.models.api import (
    CommandRef,
    ControllerCommand,
    ListControllersResponse,
    SessionSnapshot,
)


class ControllersApiImpl(BaseControllersApi):
    def __init__(self, gateway: DeviceGateway = device_gateway) -> None:
        self._gateway = gateway

    async def list_controllers(self) -> ListControllersResponse:
        controllers = self._gateway.list_sessions()
        return ListControllersResponse(count=len(controllers), controllers=controllers)

    async def get_controller(self, ptsId: str) -> SessionSnapshot:
        try:
            return self._gateway.get_session(ptsId)
        except DeviceNotFound as exc:
            raise not_found("Controller not connected", details={"ptsId": ptsId}) from exc

    async def send_controller_command(
        self,
        ptsId: str,
        controller_command: ControllerCommand,
    ) -> CommandRef:
        command = (controller_command.command or "").strip()
        if not command:
            raise bad_request("Command type is required", details={"ptsId": ptsId})
        try:
            message = await self._gateway.send(ptsId, command, controller_command.data)
        except DeviceNotFound as exc:
            raise not_found("Controller not connected", details={"ptsId": ptsId}) from exc
        return CommandRef(
            success=True,
            message="Command sent",
            request=message.model_dump(by_alias=True, exclude_none=True, mode="json"),
        )
