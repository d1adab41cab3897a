"""Gateway configuration using pydantic-settings."""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, ClassVar, Dict, Iterable, Literal

import yaml
from pydantic import Field, NonNegativeInt, PositiveFloat, PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_LOCATIONS: tuple[Path, ...] = (
    Path("/etc/pts-gateway/gateway.yaml"),
    Path("/etc/pts-gateway/gateway.yml"),
    Path("./config/gateway.yaml"),
    Path("./config/gateway.yml"),
)


class GatewayApiSettings(BaseSettings):
    """Process/runtime settings for the gateway HTTP server."""

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_prefix="PTS_GATEWAY_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="0.0.0.0", description="Bind address for the gateway.")
    port: PositiveInt = Field(default=3000, description="Port for the gateway.")
    reload: bool = Field(default=False, description="Enable uvicorn auto-reload (dev only).")
    log_level: Literal["critical", "error", "warning", "info", "debug", "trace"] = Field(
        default="info",
        description="Log level for gateway / uvicorn.",
    )


class GatewaySettings(BaseSettings):
    """Validated settings for the controller session gateway."""

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_prefix="PTS_GATEWAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Transport + protocol
    ws_path: str = Field(
        default="/ptsWebSocket",
        description="Path of the WebSocket upgrade endpoint for controllers.",
    )
    max_packet_id: PositiveInt = Field(
        default=65535,
        description="Upper bound of the packetId domain; ids wrap within [1, max_packet_id].",
    )
    max_device_id_length: NonNegativeInt = Field(
        default=24,
        description="Maximum accepted length of the X-Pts-Id header (0 disables the check).",
    )

    # Liveness
    heartbeat_interval_seconds: PositiveFloat = Field(
        default=30.0,
        description="Interval between liveness probes; an unanswered probe for one interval is fatal.",
    )
    short_connection_threshold_seconds: PositiveFloat = Field(
        default=5.0,
        description="Sessions shorter than this are reported as short connections.",
    )

    # Event log
    log_dir: Path = Field(
        default=Path("./logs"),
        description="Directory for protocol event log files.",
    )
    log_retention_days: PositiveInt = Field(
        default=30,
        description="Event log files older than this are pruned.",
    )
    log_retention_check_seconds: PositiveFloat = Field(
        default=24 * 60 * 60,
        description="Interval between retention sweeps of the event log directory.",
    )
    event_queue_max: PositiveInt = Field(
        default=10000,
        description="Maximum number of protocol events buffered before new ones are dropped.",
    )

    # Tag balance lookup
    default_tag_balance: float = Field(
        default=100.50,
        description="Balance reported by the static tag balance provider.",
    )
    default_tag_card_type: str = Field(
        default="FLEET",
        description="Card type reported by the static tag balance provider.",
    )

    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed by the admin HTTP surface.",
    )

    config_path: Path | None = Field(
        default=None,
        description="Resolved path to the on-disk config that seeded the settings.",
        exclude=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[GatewaySettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            cls._file_settings_source,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )

    @staticmethod
    def _file_settings_source(settings_cls: type[GatewaySettings] | None = None) -> Dict[str, Any]:
        for path in GatewaySettings._resolve_candidate_paths():
            data = GatewaySettings._load_file(path)
            if data is not None:
                data.setdefault("config_path", path)
                return data
        return {}

    @staticmethod
    def _resolve_candidate_paths() -> Iterable[Path]:
        explicit = os.getenv("PTS_GATEWAY_CONFIG_FILE")
        if explicit:
            yield Path(explicit).expanduser()
        yield from DEFAULT_CONFIG_LOCATIONS

    @staticmethod
    def _load_file(path: Path) -> Dict[str, Any] | None:
        if not path.is_file():
            return None
        suffix = path.suffix.lower()
        try:
            with path.open("r", encoding="utf-8") as handle:
                if suffix in {".yaml", ".yml"}:
                    raw = yaml.safe_load(handle)
                elif suffix == ".json":
                    raw = json.load(handle)
                else:
                    return None
        except OSError as exc:
            raise RuntimeError(f"Failed to read gateway config file {path}") from exc
        except (yaml.YAMLError, json.JSONDecodeError) as exc:
            raise ValueError(f"Invalid gateway config file {path}") from exc

        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ValueError(f"Gateway config file {path} must contain a mapping at top level.")
        return raw


@lru_cache()
def get_settings() -> GatewaySettings:
    """Return memoized gateway settings."""

    settings = GatewaySettings()
    settings.log_dir = settings.log_dir.expanduser().resolve()
    return settings


@lru_cache()
def get_api_settings() -> GatewayApiSettings:
    """Return memoized API process settings."""

    return GatewayApiSettings()
