"""Ports (interfaces) for the ports-and-adapters architecture."""

from kollektiv_widget.domain.ports.departure_repository import DepartureRepository
from kollektiv_widget.domain.ports.notification_sink import NotificationSink
from kollektiv_widget.domain.ports.settings_store import RouteLoadResult, SettingsStore
from kollektiv_widget.domain.ports.stop_repository import StopRepository

__all__ = [
    "DepartureRepository",
    "NotificationSink",
    "RouteLoadResult",
    "SettingsStore",
    "StopRepository",
]
