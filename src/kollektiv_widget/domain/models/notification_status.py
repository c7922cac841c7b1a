"""Notification status domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class NotificationStatus:
    """Whether notifications are currently permitted, and why not."""

    is_enabled: bool
    reason: str | None = None

    @classmethod
    def enabled(cls) -> "NotificationStatus":
        return cls(is_enabled=True)

    @classmethod
    def disabled(cls, reason: str) -> "NotificationStatus":
        return cls(is_enabled=False, reason=reason)

    @property
    def status_text(self) -> str:
        """Text shown next to the status indicator."""
        if self.is_enabled:
            return "Notifications active"
        return self.reason or "Notifications disabled"
