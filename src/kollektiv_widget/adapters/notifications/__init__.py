"""Notification sink adapters."""

from .desktop_notification_sink import DesktopNotificationSink
from .logging_notification_sink import LoggingNotificationSink

__all__ = ["DesktopNotificationSink", "LoggingNotificationSink"]
