from __future__ import annotations

from enum import Enum


class EventType(str, Enum):
    CONNECTION = "Connection"
    DISCONNECTION = "Disconnection"
    UPLOAD_PUMP_TRANSACTION = "UploadPumpTransaction"
    UPLOAD_TANK_MEASUREMENT = "UploadTankMeasurement"
    UPLOAD_IN_TANK_DELIVERY = "UploadInTankDelivery"
    UPLOAD_GPS_RECORD = "UploadGpsRecord"
    UPLOAD_ALERT_RECORD = "UploadAlertRecord"
    UPLOAD_STATUS = "UploadStatus"
    UPLOAD_CONFIGURATION = "UploadConfiguration"
    REQUEST_TAG_BALANCE = "RequestTagBalance"
    PING = "Ping"
    COMMAND = "Command"
    MALFORMED_INPUT = "MalformedInput"
    VALIDATION_FAILURE = "ValidationFailure"
    UNKNOWN_MESSAGE_TYPE = "UnknownMessageType"
    HANDLER_ERROR = "HandlerError"
    WEBSOCKET_ERROR = "WebSocketError"
    PROTOCOL_VIOLATION = "ProtocolViolation"
    CONNECTION_ISSUE = "ConnectionIssue"
    SHORT_CONNECTION = "ShortConnection"
