"""Application services (use cases) for route monitoring."""

from kollektiv_widget.application.departure_monitor import DepartureMonitor
from kollektiv_widget.application.departure_poller import DeparturePoller
from kollektiv_widget.application.notification_scheduler import (
    NotificationScheduler,
    should_notify,
)
from kollektiv_widget.application.route_registry import RouteRegistry
from kollektiv_widget.application.stop_search_service import StopSearchService

__all__ = [
    "DepartureMonitor",
    "DeparturePoller",
    "NotificationScheduler",
    "RouteRegistry",
    "StopSearchService",
    "should_notify",
]
