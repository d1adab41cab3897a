from .settings import GatewayApiSettings, GatewaySettings, get_api_settings, get_settings

__all__ = ["GatewayApiSettings", "GatewaySettings", "get_api_settings", "get_settings"]
