"""Domain layer - core business logic and models."""

from kollektiv_widget.domain.models import (
    Departure,
    NotificationWindow,
    Route,
    TransportMode,
)
from kollektiv_widget.domain.ports import (
    DepartureRepository,
    NotificationSink,
    SettingsStore,
    StopRepository,
)

__all__ = [
    "Departure",
    "DepartureRepository",
    "NotificationSink",
    "NotificationWindow",
    "Route",
    "SettingsStore",
    "StopRepository",
    "TransportMode",
]
