# coding: utf-8

from typing import ClassVar, Tuple  # noqa: F401

from pydantic import StrictStr

from pts_gateway.models.api import (
    CommandRef,
    ControllerCommand,
    ListControllersResponse,
    SessionSnapshot,
)


class BaseControllersApi:
    subclasses: ClassVar[Tuple] = ()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        BaseControllersApi.subclasses = BaseControllersApi.subclasses + (cls,)

    async def list_controllers(
        self,
    ) -> ListControllersResponse:
        ...

    async def get_controller(
        self,
        ptsId: StrictStr,
    ) -> SessionSnapshot:
        ...

    async def send_controller_command(
        self,
        ptsId: StrictStr,
        controller_command: ControllerCommand,
    ) -> CommandRef:
        ...
