"""Connect to a running gateway as a PTS controller and exercise each request type."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any

import websockets

LOGGER = logging.getLogger("simulate_device")

SAMPLES: list[tuple[str, dict[str, Any]]] = [
    (
        "UploadPumpTransaction",
        {"pumpId": 1, "nozzleId": 2, "fuelType": "DIESEL", "volume": 40.5, "amount": 81.0, "transactionId": "T-1001"},
    ),
    ("UploadTankMeasurement", {"tankId": 1, "fuelType": "DIESEL", "level": 1520.0, "volume": 18000.0, "temperature": 14.2}),
    ("UploadInTankDelivery", {"tankId": 1, "fuelType": "DIESEL", "deliveredVolume": 5000.0, "deliveryNumber": "D-77"}),
    ("UploadGpsRecord", {"latitude": 51.5072, "longitude": -0.1276, "speed": 0, "satellites": 9}),
    ("UploadAlertRecord", {"alertType": "TANK_LOW", "severity": "WARNING", "message": "Tank 1 below 10%"}),
    ("UploadStatus", {"systemStatus": "OK", "pumps": [{"id": 1, "state": "IDLE"}], "batteryLevel": 98}),
    ("UploadConfiguration", {"configVersion": "2024.1", "configData": {"pumps": 4}, "changeReason": "startup"}),
    ("RequestTagBalance", {"tagId": "TAG-0042"}),
    ("Ping", {}),
]


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate a PTS controller against the gateway.")
    parser.add_argument("--url", default="ws://127.0.0.1:3000/ptsWebSocket")
    parser.add_argument("--pts-id", default="SIM-PTS-001")
    parser.add_argument("--firmware", default="2024-01-15T10:00:00")
    parser.add_argument("--config-id", default="cfg-sim")
    parser.add_argument("--log-level", default="info")
    return parser.parse_args()


async def run(args: argparse.Namespace) -> None:
    headers = {
        "X-Pts-Id": args.pts_id,
        "X-Pts-Firmware-Version-DateTime": args.firmware,
        "X-Pts-Configuration-Identifier": args.config_id,
    }
    LOGGER.info("Connecting to %s as %s", args.url, args.pts_id)
    async with websockets.connect(args.url, additional_headers=headers) as ws:
        LOGGER.info("<- %s", await ws.recv())
        for packet_id, (message_type, data) in enumerate(SAMPLES, start=1):
            frame = {
                "type": message_type,
                "packetId": packet_id,
                "data": data,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
            await ws.send(json.dumps(frame))
            LOGGER.info("-> %s #%d", message_type, packet_id)
            while True:
                reply = json.loads(await ws.recv())
                if reply.get("type") == "Ping" and "success" not in reply:
                    # Server liveness probe; answer and keep waiting for our reply.
                    await ws.send(json.dumps({"type": "Pong", "packetId": reply.get("packetId", 0)}))
                    continue
                LOGGER.info("<- %s", json.dumps(reply))
                break


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    asyncio.run(run(args))


if __name__ == "__main__":
    main()
