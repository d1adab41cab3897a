from __future__ import annotations

import asyncio
import logging
from typing import Optional

from pts_gateway.apis.logs_api_base import BaseLogsApi
from pts_gateway.events import LogStore, event_sink
from pts_gateway.http.errors import bad_request, internal_error
from pts_gateway.models.api import (
    LogEntriesResponse,
    LogFilesResponse,
    LogSummaryResponse,
)

LOGGER = logging.getLogger(__name__)


class LogsApiImpl(BaseLogsApi):
    def __init__(self, store: Optional[LogStore] = None) -> None:
        self._store = store or event_sink.store

    async def list_log_files(self) -> LogFilesResponse:
        try:
            files = await asyncio.to_thread(self._store.list_files)
        except OSError as exc:
            LOGGER.exception("Failed to list event log files")
            raise internal_error("Failed to read logs") from exc
        return LogFilesResponse(
            log_directory=str(self._store.log_dir),
            log_files=files,
            total_files=len(files),
        )

    async def get_log_summary(self) -> LogSummaryResponse:
        try:
            summary = await asyncio.to_thread(self._store.summary)
        except OSError as exc:
            LOGGER.exception("Failed to summarize event logs")
            raise internal_error("Failed to generate summary") from exc
        return LogSummaryResponse.model_validate(summary)

    async def get_recent_logs(self, eventType: str, limit: Optional[int]) -> LogEntriesResponse:
        try:
            entries = await asyncio.to_thread(self._store.recent, eventType, limit or 50)
        except ValueError as exc:
            raise bad_request(str(exc), details={"messageType": eventType}) from exc
        except OSError as exc:
            LOGGER.exception("Failed to read %s event log", eventType)
            raise internal_error("Failed to read logs") from exc
        return LogEntriesResponse(message_type=eventType, logs=entries, count=len(entries))
