# coding: utf-8

from typing import ClassVar, Optional, Tuple  # noqa: F401

from pydantic import Field, StrictStr
from typing_extensions import Annotated

from pts_gateway.models.api import LogEntriesResponse, LogFilesResponse, LogSummaryResponse


class BaseLogsApi:
    subclasses: ClassVar[Tuple] = ()

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        BaseLogsApi.subclasses = BaseLogsApi.subclasses + (cls,)

    async def list_log_files(
        self,
    ) -> LogFilesResponse:
        ...

    async def get_log_summary(
        self,
    ) -> LogSummaryResponse:
        ...

    async def get_recent_logs(
        self,
        eventType: StrictStr,
        limit: Optional[Annotated[int, Field(le=1000, ge=1)]],
    ) -> LogEntriesResponse:
        ...
