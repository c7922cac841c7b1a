"""Notification record domain model."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta


@dataclass
class NotificationRecord:
    """Rolling set of departure identifiers that already triggered a notification.

    The whole set is wiped once per clear interval instead of expiring
    entries one by one.
    """

    notified_ids: set[str] = field(default_factory=set)
    last_cleared: datetime | None = None

    def __contains__(self, notification_id: object) -> bool:
        return notification_id in self.notified_ids

    def __len__(self) -> int:
        return len(self.notified_ids)

    def mark_notified(self, notification_id: str) -> None:
        self.notified_ids.add(notification_id)

    def is_clear_due(self, now: datetime, interval: timedelta) -> bool:
        """Check whether more than the interval elapsed since the last clear."""
        if self.last_cleared is None:
            return False
        return now - self.last_cleared > interval

    def clear(self, now: datetime) -> None:
        self.notified_ids.clear()
        self.last_cleared = now
