"""Payload shape models for controller uploads.

Each model checks presence and primitive type of the fields a request type
declares. Unknown fields are dropped so that the validated model doubles as
the normalized domain record forwarded to the event log.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    field_validator,
)
from typing_extensions import Annotated


def _require_present(value: Any) -> Any:
    if isinstance(value, str):
        if not value.strip():
            raise ValueError("value must be non-empty")
        return value
    if not value:
        raise ValueError("value is required")
    return value


Present = Annotated[Any, AfterValidator(_require_present)]
Numeric = Union[StrictInt, StrictFloat]


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PumpTransaction(_Payload):
    pump_id: Present = Field(alias="pumpId")
    nozzle_id: Present = Field(alias="nozzleId")
    fuel_type: Present = Field(alias="fuelType")
    volume: Numeric
    amount: Numeric
    tag_id: Optional[Any] = Field(default=None, alias="tagId")
    transaction_id: Optional[Any] = Field(default=None, alias="transactionId")


class TankMeasurement(_Payload):
    tank_id: Present = Field(alias="tankId")
    fuel_type: Present = Field(alias="fuelType")
    level: Numeric
    volume: Numeric
    temperature: Optional[Any] = None
    water_level: Optional[Any] = Field(default=None, alias="waterLevel")
    ullage: Optional[Any] = None


class InTankDelivery(_Payload):
    tank_id: Present = Field(alias="tankId")
    fuel_type: Present = Field(alias="fuelType")
    delivered_volume: Numeric = Field(alias="deliveredVolume")
    delivery_number: Optional[Any] = Field(default=None, alias="deliveryNumber")
    driver_id: Optional[Any] = Field(default=None, alias="driverId")
    supplier_id: Optional[Any] = Field(default=None, alias="supplierId")
    temperature: Optional[Any] = None


class GpsRecord(_Payload):
    latitude: Numeric
    longitude: Numeric
    altitude: Optional[Any] = None
    speed: Optional[Any] = None
    heading: Optional[Any] = None
    accuracy: Optional[Any] = None
    satellites: Optional[Any] = None


class AlertRecord(_Payload):
    alert_type: Present = Field(alias="alertType")
    severity: Present
    message: Present
    component: Optional[Any] = None
    value: Optional[Any] = None
    threshold: Optional[Any] = None


class StatusReport(_Payload):
    system_status: Present = Field(alias="systemStatus")
    pumps: list[Any] = Field(default_factory=list)
    tanks: list[Any] = Field(default_factory=list)
    readers: list[Any] = Field(default_factory=list)
    price_boards: list[Any] = Field(default_factory=list, alias="priceBoards")
    gps_status: Optional[Any] = Field(default=None, alias="gpsStatus")
    communication_status: Optional[Any] = Field(default=None, alias="communicationStatus")
    battery_level: Optional[Any] = Field(default=None, alias="batteryLevel")
    temperature: Optional[Any] = None

    @field_validator("pumps", "tanks", "readers", "price_boards", mode="before")
    @classmethod
    def _default_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class ConfigurationUpdate(_Payload):
    config_version: Present = Field(alias="configVersion")
    config_data: Present = Field(alias="configData")
    change_reason: Optional[Any] = Field(default=None, alias="changeReason")


class TagBalanceRequest(_Payload):
    tag_id: Present = Field(alias="tagId")


class TagBalance(_Payload):
    tag_id: Any = Field(alias="tagId")
    balance: float
    is_valid: bool = Field(alias="isValid")
    card_type: Optional[str] = Field(default=None, alias="cardType")
    expiry_date: Optional[str] = Field(default=None, alias="expiryDate")


__all__ = [
    "AlertRecord",
    "ConfigurationUpdate",
    "GpsRecord",
    "InTankDelivery",
    "PumpTransaction",
    "StatusReport",
    "TagBalance",
    "TagBalanceRequest",
    "TankMeasurement",
]
