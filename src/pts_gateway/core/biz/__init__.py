"""Protocol dispatch and request handlers."""

from .dispatcher import MessageDispatcher, Route, default_routes
from .handlers import StaticTagBalanceProvider, TagBalanceProvider

__all__ = [
    "MessageDispatcher",
    "Route",
    "StaticTagBalanceProvider",
    "TagBalanceProvider",
    "default_routes",
]
