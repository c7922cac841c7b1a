"""Monitor state domain model."""

from dataclasses import dataclass, field
from datetime import datetime

from .departure import Departure
from .notification_status import NotificationStatus
from .route import Route
from .status_summary import StatusSummary


@dataclass(frozen=True)
class MonitorState:
    """Snapshot published to observers after every poll cycle."""

    routes: tuple[Route, ...]
    departures: dict[str, tuple[Departure, ...]]  # route id -> displayed departures
    last_updated: datetime
    notification_status: NotificationStatus
    summary: StatusSummary = field(default_factory=StatusSummary)
    failed_route_ids: frozenset[str] = frozenset()
