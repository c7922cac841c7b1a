"""Adapters layer - external system integrations."""

from kollektiv_widget.adapters.config import AppConfig
from kollektiv_widget.adapters.console import ConsolePresenter
from kollektiv_widget.adapters.entur_api import (
    EnturDepartureRepository,
    EnturHttpClient,
    EnturStopRepository,
)
from kollektiv_widget.adapters.notifications import (
    DesktopNotificationSink,
    LoggingNotificationSink,
)
from kollektiv_widget.adapters.storage import InMemorySettingsStore, JsonSettingsStore

__all__ = [
    "AppConfig",
    "ConsolePresenter",
    "DesktopNotificationSink",
    "EnturDepartureRepository",
    "EnturHttpClient",
    "EnturStopRepository",
    "InMemorySettingsStore",
    "JsonSettingsStore",
    "LoggingNotificationSink",
]
