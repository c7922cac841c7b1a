"""In-memory settings store."""

from dataclasses import replace

from kollektiv_widget.domain.models.notification_record import NotificationRecord
from kollektiv_widget.domain.models.notification_window import NotificationWindow
from kollektiv_widget.domain.models.preferences import Preferences
from kollektiv_widget.domain.models.route import Route
from kollektiv_widget.domain.ports.settings_store import RouteLoadResult


class InMemorySettingsStore:
    """Settings store that keeps everything in process memory."""

    def __init__(
        self,
        routes: list[Route] | None = None,
        window: NotificationWindow | None = None,
        from_legacy: bool = False,
    ) -> None:
        self.routes: list[Route] = list(routes or [])
        self.window = window
        self.from_legacy = from_legacy
        self.record = NotificationRecord()
        self.preferences = Preferences()
        self.save_count = 0

    def load_routes(self) -> RouteLoadResult:
        return RouteLoadResult(routes=list(self.routes), from_legacy=self.from_legacy)

    def save_routes(self, routes: list[Route]) -> None:
        self.routes = list(routes)
        self.from_legacy = False
        self.save_count += 1

    def load_notification_window(self) -> NotificationWindow | None:
        return self.window

    def save_notification_window(self, window: NotificationWindow) -> None:
        self.window = window

    def load_notification_record(self) -> NotificationRecord:
        return NotificationRecord(
            notified_ids=set(self.record.notified_ids), last_cleared=self.record.last_cleared
        )

    def save_notification_record(self, record: NotificationRecord) -> None:
        self.record = NotificationRecord(
            notified_ids=set(record.notified_ids), last_cleared=record.last_cleared
        )

    def load_preferences(self) -> Preferences:
        return self.preferences

    def save_preferences(self, preferences: Preferences) -> None:
        self.preferences = replace(preferences)
