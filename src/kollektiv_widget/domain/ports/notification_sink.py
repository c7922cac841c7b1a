"""Notification sink port."""

from typing import Protocol


class NotificationSink(Protocol):
    """Port for delivering user-facing notifications."""

    async def send(self, title: str, body: str, sound: str | None = None) -> bool:
        """Deliver a notification.

        Returns:
            True if the platform confirmed delivery, False otherwise.
        """
        ...
