"""Persisted settings schemas and their conversion to domain models.

Keys follow the camelCase names used by the key-value settings of earlier
releases so existing settings files keep loading.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from kollektiv_widget.domain.models.notification_record import NotificationRecord
from kollektiv_widget.domain.models.notification_window import NotificationWindow, minute_of_day
from kollektiv_widget.domain.models.preferences import Preferences
from kollektiv_widget.domain.models.route import Route, make_route_id
from kollektiv_widget.domain.models.transport_mode import TransportMode

SAVED_ROUTES_KEY = "savedRoutes"
LEGACY_MONITORED_LINES_KEY = "monitoredLines"
LEGACY_LEAD_TIME_KEY = "leadTimeMinutes"


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RouteRecord(_Record):
    """Current shape of a saved route."""

    id: str
    stop_id: str = Field(alias="stopId")
    stop_name: str = Field(alias="stopName")
    line_code: str = Field(alias="lineCode")
    line_name: str = Field(default="", alias="lineName")
    destination: str
    transport_mode: str = Field(default="bus", alias="transportMode")
    notification_lead_time_minutes: int | None = Field(
        default=None, alias="notificationLeadTimeMinutes"
    )

    @classmethod
    def from_route(cls, route: Route) -> "RouteRecord":
        return cls(
            id=route.id,
            stop_id=route.stop_id,
            stop_name=route.stop_name,
            line_code=route.line_code,
            line_name=route.line_name,
            destination=route.destination,
            transport_mode=route.transport_mode.value,
            notification_lead_time_minutes=route.notification_lead_time_minutes,
        )

    def to_route(self) -> Route:
        route = Route(
            id=self.id,
            stop_id=self.stop_id,
            stop_name=self.stop_name,
            line_code=self.line_code,
            line_name=self.line_name or self.line_code,
            destination=self.destination,
            transport_mode=TransportMode.from_api(self.transport_mode),
            notification_lead_time_minutes=self.notification_lead_time_minutes,
        )
        if route.notification_lead_time_minutes is not None:
            route = route.with_lead_time(route.notification_lead_time_minutes)
        return route


class LegacyLineRecord(_Record):
    """Older "monitored line" shape: optional id, per-line lead time and flags."""

    id: str | None = None
    stop_id: str = Field(alias="stopId")
    stop_name: str = Field(default="", alias="stopName")
    line_code: str = Field(alias="lineCode")
    line_name: str | None = Field(default=None, alias="lineName")
    destination: str
    transport_mode: str | None = Field(default=None, alias="transportMode")
    notification_lead_time: int | None = Field(default=None, alias="notificationLeadTime")

    def to_route(self, global_lead_time: int | None = None) -> Route:
        lead_time = self.notification_lead_time
        if lead_time is None and global_lead_time and global_lead_time > 0:
            lead_time = global_lead_time
        route = Route(
            id=self.id or make_route_id(self.stop_id, self.line_code, self.destination),
            stop_id=self.stop_id,
            stop_name=self.stop_name or self.stop_id,
            line_code=self.line_code,
            line_name=self.line_name or self.line_code,
            destination=self.destination,
            transport_mode=TransportMode.from_api(self.transport_mode),
        )
        return route.with_lead_time(lead_time) if lead_time is not None else route


class WindowRecord(_Record):
    """Notification window settings, including the legacy hour/minute keys."""

    enabled: bool | None = Field(default=None, alias="notificationsEnabled")
    start_minute_of_day: int | None = Field(default=None, alias="activeHoursStart")
    end_minute_of_day: int | None = Field(default=None, alias="activeHoursEnd")
    active_weekdays: list[int] | None = Field(default=None, alias="activeWeekdays")

    legacy_start_hour: int | None = Field(default=None, alias="notificationStartHour")
    legacy_start_minute: int | None = Field(default=None, alias="notificationStartMinute")
    legacy_end_hour: int | None = Field(default=None, alias="notificationEndHour")
    legacy_end_minute: int | None = Field(default=None, alias="notificationEndMinute")
    # Sunday-first numbering: 1=Sunday, 2=Monday ... 7=Saturday
    legacy_weekdays: list[int] | None = Field(default=None, alias="selectedWeekdays")

    @property
    def is_empty(self) -> bool:
        return all(value is None for value in self.model_dump().values())

    def to_window(self, defaults: NotificationWindow) -> NotificationWindow:
        start = self.start_minute_of_day
        if start is None and self.legacy_start_hour is not None:
            start = minute_of_day(self.legacy_start_hour, self.legacy_start_minute or 0)
        end = self.end_minute_of_day
        if end is None and self.legacy_end_hour is not None:
            end = minute_of_day(self.legacy_end_hour, self.legacy_end_minute or 0)

        weekdays: frozenset[int] | None = None
        if self.active_weekdays is not None:
            weekdays = frozenset(self.active_weekdays)
        elif self.legacy_weekdays is not None:
            weekdays = frozenset(7 if day == 1 else day - 1 for day in self.legacy_weekdays)

        return NotificationWindow(
            enabled=defaults.enabled if self.enabled is None else self.enabled,
            start_minute_of_day=defaults.start_minute_of_day if start is None else start,
            end_minute_of_day=defaults.end_minute_of_day if end is None else end,
            active_weekdays=defaults.active_weekdays if weekdays is None else weekdays,
        )

    @classmethod
    def from_window(cls, window: NotificationWindow) -> "WindowRecord":
        return cls(
            enabled=window.enabled,
            start_minute_of_day=window.start_minute_of_day,
            end_minute_of_day=window.end_minute_of_day,
            active_weekdays=sorted(window.active_weekdays),
        )

    def current_keys(self) -> dict[str, object]:
        """Serialized form without legacy keys."""
        return self.model_dump(
            by_alias=True,
            include={"enabled", "start_minute_of_day", "end_minute_of_day", "active_weekdays"},
        )


class NotificationRecordSchema(_Record):
    notified_ids: list[str] = Field(default_factory=list, alias="notifiedDepartureIds")
    last_cleared: datetime | None = Field(default=None, alias="lastNotificationClear")

    @field_validator("last_cleared")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        """Read timestamps without an offset as UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    def to_record(self) -> NotificationRecord:
        return NotificationRecord(notified_ids=set(self.notified_ids), last_cleared=self.last_cleared)

    @classmethod
    def from_record(cls, record: NotificationRecord) -> "NotificationRecordSchema":
        return cls(notified_ids=sorted(record.notified_ids), last_cleared=record.last_cleared)


class PreferencesSchema(_Record):
    dark_mode: bool = Field(default=False, alias="isDarkMode")
    launch_at_login: bool = Field(default=False, alias="launchAtLogin")

    def to_preferences(self) -> Preferences:
        return Preferences(dark_mode=self.dark_mode, launch_at_login=self.launch_at_login)

    @classmethod
    def from_preferences(cls, preferences: Preferences) -> "PreferencesSchema":
        return cls(dark_mode=preferences.dark_mode, launch_at_login=preferences.launch_at_login)
