"""Models for the administrative HTTP surface."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Error(_ApiModel):
    error: str
    message: str
    details: Optional[Dict[str, Any]] = None


class SessionSnapshot(_ApiModel):
    """Read-only copy of a controller session."""

    device_id: str = Field(alias="ptsId")
    firmware_version: Optional[str] = Field(default=None, alias="firmwareVersion")
    config_identifier: Optional[str] = Field(default=None, alias="configIdentifier")
    client: Optional[str] = None
    liveness_state: str = Field(alias="livenessState")
    is_alive: bool = Field(alias="isAlive")
    connected_at: datetime = Field(alias="connectionTime")
    last_inbound_at: Optional[datetime] = Field(default=None, alias="lastInboundAt")
    last_probe_reply_at: Optional[datetime] = Field(default=None, alias="lastPing")
    inbound_message_count: int = Field(alias="messageCount")


class HealthResponse(_ApiModel):
    status: str = "OK"
    connected_controllers: int = Field(alias="connectedControllers")
    timestamp: datetime


class ListControllersResponse(_ApiModel):
    count: int
    controllers: List[SessionSnapshot]


class ControllerCommand(_ApiModel):
    command: str
    data: Optional[Dict[str, Any]] = None


class CommandRef(_ApiModel):
    success: bool = True
    message: str = "Command sent"
    request: Dict[str, Any]


class LogFilesResponse(_ApiModel):
    log_directory: str = Field(alias="logDirectory")
    log_files: List[str] = Field(alias="logFiles")
    total_files: int = Field(alias="totalFiles")


class LogEntriesResponse(_ApiModel):
    message_type: str = Field(alias="messageType")
    logs: List[Dict[str, Any]]
    count: int


class LogTypeSummary(_ApiModel):
    file_count: int = Field(default=0, alias="fileCount")
    total_entries: int = Field(default=0, alias="totalEntries")
    last_entry: Optional[datetime] = Field(default=None, alias="lastEntry")


class LogSummaryResponse(_ApiModel):
    total_log_files: int = Field(alias="totalLogFiles")
    total_entries: int = Field(alias="totalEntries")
    last_updated: Optional[datetime] = Field(default=None, alias="lastUpdated")
    message_types: Dict[str, LogTypeSummary] = Field(default_factory=dict, alias="messageTypes")
