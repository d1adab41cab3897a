from __future__ import annotations

from datetime import datetime, timezone

from pts_gateway.apis.health_api_base import BaseHealthApi
from pts_gateway.core.network import device_gateway
from pts_gateway.models.api import HealthResponse


class HealthApiImpl(BaseHealthApi):
    async def get_health(self) -> HealthResponse:
        return HealthResponse(
            status="OK",
            connected_controllers=device_gateway.count(),
            timestamp=datetime.now(timezone.utc),
        )
