"""Domain models for the departure widget."""

from kollektiv_widget.domain.models.cancellation_token import (
    CancellationToken,
    SearchCancelledError,
)
from kollektiv_widget.domain.models.departure import Departure
from kollektiv_widget.domain.models.departure_notification import DepartureNotification
from kollektiv_widget.domain.models.error_details import ErrorDetails
from kollektiv_widget.domain.models.monitor_state import MonitorState
from kollektiv_widget.domain.models.notification_record import NotificationRecord
from kollektiv_widget.domain.models.notification_status import NotificationStatus
from kollektiv_widget.domain.models.notification_window import NotificationWindow
from kollektiv_widget.domain.models.preferences import Preferences
from kollektiv_widget.domain.models.route import Route
from kollektiv_widget.domain.models.status_summary import StatusSummary
from kollektiv_widget.domain.models.stop_search_result import StopSearchResult
from kollektiv_widget.domain.models.transit_line import TransitLine
from kollektiv_widget.domain.models.transport_mode import TransportMode

__all__ = [
    "CancellationToken",
    "Departure",
    "DepartureNotification",
    "ErrorDetails",
    "MonitorState",
    "NotificationRecord",
    "NotificationStatus",
    "NotificationWindow",
    "Preferences",
    "Route",
    "SearchCancelledError",
    "StatusSummary",
    "StopSearchResult",
    "TransitLine",
    "TransportMode",
]
