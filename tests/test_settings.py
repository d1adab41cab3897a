from pathlib import Path

from pts_gateway.config.settings import GatewayApiSettings, GatewaySettings


def test_defaults(monkeypatch):
    monkeypatch.delenv("PTS_GATEWAY_LOG_DIR", raising=False)
    monkeypatch.setenv("PTS_GATEWAY_CONFIG_FILE", "/nonexistent/gateway.yaml")

    settings = GatewaySettings()

    assert settings.ws_path == "/ptsWebSocket"
    assert settings.max_packet_id == 65535
    assert settings.heartbeat_interval_seconds == 30.0
    assert settings.short_connection_threshold_seconds == 5.0
    assert settings.max_device_id_length == 24
    assert settings.log_retention_days == 30
    assert settings.log_dir == Path("./logs")
    assert GatewayApiSettings().port == 3000


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PTS_GATEWAY_HEARTBEAT_INTERVAL_SECONDS", "12.5")
    monkeypatch.setenv("PTS_GATEWAY_MAX_PACKET_ID", "999")
    monkeypatch.setenv("PTS_GATEWAY_API_PORT", "3100")

    assert GatewaySettings().heartbeat_interval_seconds == 12.5
    assert GatewaySettings().max_packet_id == 999
    assert GatewayApiSettings().port == 3100


def test_yaml_file_source(tmp_path, monkeypatch):
    config = tmp_path / "gateway.yaml"
    config.write_text("heartbeat_interval_seconds: 10\nws_path: /pts\n", encoding="utf-8")
    monkeypatch.setenv("PTS_GATEWAY_CONFIG_FILE", str(config))

    settings = GatewaySettings()

    assert settings.heartbeat_interval_seconds == 10
    assert settings.ws_path == "/pts"
    assert settings.config_path == config


def test_init_arguments_win_over_file(tmp_path, monkeypatch):
    config = tmp_path / "gateway.json"
    config.write_text('{"max_device_id_length": 10}', encoding="utf-8")
    monkeypatch.setenv("PTS_GATEWAY_CONFIG_FILE", str(config))

    assert GatewaySettings().max_device_id_length == 10
    assert GatewaySettings(max_device_id_length=0).max_device_id_length == 0
