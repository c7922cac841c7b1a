"""Settings store port."""

from dataclasses import dataclass, field
from typing import Protocol

from kollektiv_widget.domain.models.notification_record import NotificationRecord
from kollektiv_widget.domain.models.notification_window import NotificationWindow
from kollektiv_widget.domain.models.preferences import Preferences
from kollektiv_widget.domain.models.route import Route


@dataclass(frozen=True)
class RouteLoadResult:
    """Routes read from storage, and whether they came from the legacy shape."""

    routes: list[Route] = field(default_factory=list)
    from_legacy: bool = False


class SettingsStore(Protocol):
    """Port for typed load/save of persisted settings."""

    def load_routes(self) -> RouteLoadResult:
        """Load monitored routes, falling back to the legacy shape."""
        ...

    def save_routes(self, routes: list[Route]) -> None:
        """Save monitored routes in the current shape."""
        ...

    def load_notification_window(self) -> NotificationWindow | None:
        """Load the notification window, or None if never saved."""
        ...

    def save_notification_window(self, window: NotificationWindow) -> None: ...

    def load_notification_record(self) -> NotificationRecord: ...

    def save_notification_record(self, record: NotificationRecord) -> None: ...

    def load_preferences(self) -> Preferences: ...

    def save_preferences(self, preferences: Preferences) -> None: ...
