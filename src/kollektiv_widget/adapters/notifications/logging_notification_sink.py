"""Notification sink that only writes to the log."""

import logging

logger = logging.getLogger(__name__)


class LoggingNotificationSink:
    """Logs notifications instead of showing them. Useful on headless hosts."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    async def send(self, title: str, body: str, sound: str | None = None) -> bool:
        logger.info(f"[notification] {title}: {body}")
        self.sent.append((title, body))
        return True
