"""Notification window domain model."""

from dataclasses import dataclass, field
from datetime import datetime

from .notification_status import NotificationStatus

MINUTES_PER_DAY = 24 * 60

# ISO weekdays: 1=Monday ... 7=Sunday
WEEKDAYS = (1, 2, 3, 4, 5, 6, 7)
WORKDAYS = frozenset({1, 2, 3, 4, 5})
WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def minute_of_day(hour: int, minute: int) -> int:
    """Convert a wall-clock time to minutes since midnight."""
    return hour * 60 + minute


def format_minute_of_day(value: int) -> str:
    """Render minutes since midnight as HH:MM."""
    return f"{value // 60:02d}:{value % 60:02d}"


def parse_minute_of_day(text: str) -> int:
    """Parse HH:MM into minutes since midnight.

    Raises:
        ValueError: If the text is not a valid HH:MM time.
    """
    hour_text, sep, minute_text = text.strip().partition(":")
    if not sep:
        raise ValueError(f"Expected HH:MM, got {text!r}")
    hour, minute = int(hour_text), int(minute_text)
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"Time out of range: {text!r}")
    return minute_of_day(hour, minute)


@dataclass(frozen=True)
class NotificationWindow:
    """Daily active-hours window and weekdays during which notifications fire.

    Both bounds are inclusive. When start is later than end the window wraps
    past midnight (e.g. 22:00-06:00).
    """

    enabled: bool = True
    start_minute_of_day: int = minute_of_day(8, 0)
    end_minute_of_day: int = minute_of_day(17, 0)
    active_weekdays: frozenset[int] = field(default_factory=lambda: WORKDAYS)

    def __post_init__(self) -> None:
        for value in (self.start_minute_of_day, self.end_minute_of_day):
            if not 0 <= value < MINUTES_PER_DAY:
                raise ValueError(f"Minute of day out of range: {value}")
        unknown = set(self.active_weekdays) - set(WEEKDAYS)
        if unknown:
            raise ValueError(f"Unknown weekdays: {sorted(unknown)}")

    def contains_minute(self, value: int) -> bool:
        """Check whether a minute of day falls inside the active hours."""
        start, end = self.start_minute_of_day, self.end_minute_of_day
        if start <= end:
            return start <= value <= end
        return value >= start or value <= end

    def status(self, local_now: datetime) -> NotificationStatus:
        """Evaluate the window at a local wall-clock time."""
        if not self.enabled:
            return NotificationStatus.disabled("Notifications disabled in settings")

        weekday = local_now.isoweekday()
        if weekday not in self.active_weekdays:
            return NotificationStatus.disabled(f"Disabled on {WEEKDAY_NAMES[weekday - 1]}")

        if not self.contains_minute(minute_of_day(local_now.hour, local_now.minute)):
            start = format_minute_of_day(self.start_minute_of_day)
            end = format_minute_of_day(self.end_minute_of_day)
            return NotificationStatus.disabled(f"Outside active hours ({start} - {end})")

        return NotificationStatus.enabled()

    def is_active(self, local_now: datetime) -> bool:
        return self.status(local_now).is_enabled


_WEEKDAY_ABBREVIATIONS = {name[:3].lower(): index + 1 for index, name in enumerate(WEEKDAY_NAMES)}


def parse_weekdays(text: str) -> frozenset[int]:
    """Parse a comma separated weekday list ("mon,tue" or "1,2") into ISO weekdays.

    Raises:
        ValueError: If an entry is not a known weekday.
    """
    weekdays: set[int] = set()
    for item in text.split(","):
        token = item.strip().lower()
        if not token:
            continue
        if token.isdigit() and int(token) in WEEKDAYS:
            weekdays.add(int(token))
        elif token[:3] in _WEEKDAY_ABBREVIATIONS:
            weekdays.add(_WEEKDAY_ABBREVIATIONS[token[:3]])
        else:
            raise ValueError(f"Unknown weekday: {item.strip()!r}")
    return frozenset(weekdays)


def format_weekdays(weekdays: frozenset[int]) -> str:
    """Render ISO weekdays as abbreviated names in week order."""
    return ",".join(WEEKDAY_NAMES[day - 1][:3] for day in sorted(weekdays))
