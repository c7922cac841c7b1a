"""12-factor configuration adapter using environment variables and TOML config."""

import tomllib
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from kollektiv_widget.domain.models.notification_window import (
    NotificationWindow,
    parse_minute_of_day,
    parse_weekdays,
)

# TOML section -> fields it may override
_TOML_SECTIONS: dict[str, tuple[str, ...]] = {
    "api": (
        "entur_client_name",
        "entur_api_timeout",
        "entur_min_delay_seconds",
        "number_of_departures",
        "lines_lookahead_departures",
        "search_result_size",
        "search_language",
    ),
    "monitor": (
        "refresh_interval_seconds",
        "max_parallel_polls",
        "departures_per_route",
        "timezone",
        "settings_file",
    ),
    "notifications": (
        "notification_sink",
        "notification_sound",
        "dedup_clear_interval_hours",
        "notifications_enabled",
        "active_hours_start",
        "active_hours_end",
        "active_weekdays",
    ),
}


class AppConfig(BaseSettings):
    """Application configuration following 12-factor principles."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    # Entur API configuration
    entur_client_name: str = Field(
        default="kollektivwidget-python",
        description="Value of the ET-Client-Name header (<company>-<application>)",
    )
    entur_journey_planner_url: str = Field(
        default="https://api.entur.io/journey-planner/v3/graphql",
        description="Entur journey planner GraphQL endpoint",
    )
    entur_geocoder_url: str = Field(
        default="https://api.entur.io/geocoder/v1/search",
        description="Entur geocoder search endpoint",
    )
    entur_api_timeout: int = Field(default=10, description="Timeout for Entur requests in seconds")
    entur_min_delay_seconds: float = Field(
        default=0.0,
        description="Minimum delay between Entur requests in seconds (0 disables rate limiting)",
    )
    number_of_departures: int = Field(
        default=20, description="Number of upcoming calls fetched per stop and poll"
    )
    lines_lookahead_departures: int = Field(
        default=50, description="Number of upcoming calls sampled to list a stop's lines"
    )
    search_result_size: int = Field(default=10, description="Maximum stop search results")
    search_language: str = Field(default="no", description="Stop search result language")

    # Monitor configuration
    refresh_interval_seconds: int = Field(
        default=15, description="Interval between departure polls in seconds"
    )
    max_parallel_polls: int = Field(
        default=8, description="Maximum number of routes polled concurrently"
    )
    departures_per_route: int = Field(
        default=3, description="Number of upcoming departures displayed per route"
    )
    timezone: str = Field(
        default="Europe/Oslo",
        description="Timezone for the notification window (IANA timezone name)",
    )
    settings_file: str = Field(
        default="~/.config/kollektivwidget/settings.json",
        description="Path of the JSON file holding routes and notification settings",
    )

    # Notification configuration
    notification_sink: str = Field(
        default="desktop", description="Notification delivery: 'desktop' or 'log'"
    )
    notification_sound: str | None = Field(
        default="default", description="Sound name passed to desktop notifications"
    )
    dedup_clear_interval_hours: int = Field(
        default=24, description="Hours after which the notified-departure set is cleared"
    )
    notifications_enabled: bool = Field(
        default=True, description="Default for the global notification switch"
    )
    active_hours_start: str = Field(default="08:00", description="Default window start (HH:MM)")
    active_hours_end: str = Field(default="17:00", description="Default window end (HH:MM)")
    active_weekdays: str = Field(
        default="mon,tue,wed,thu,fri", description="Default active weekdays, comma separated"
    )

    log_level: str = Field(default="INFO", description="Logging level")

    # Optional TOML file overriding the values above per section
    config_file: str | None = Field(
        default=None,
        description="Path to TOML configuration file with [api], [monitor] and [notifications]",
    )

    @classmethod
    def for_testing(cls, **overrides: Any) -> "AppConfig":
        """Build a configuration that ignores any .env file."""
        return cls(_env_file=None, **overrides)  # type: ignore[call-arg]

    @field_validator("notification_sink")
    @classmethod
    def validate_notification_sink(cls, v: str) -> str:
        """Validate notification sink is either 'desktop' or 'log'."""
        if v.lower() not in ("desktop", "log"):
            raise ValueError("notification_sink must be either 'desktop' or 'log'")
        return v.lower()

    @field_validator("refresh_interval_seconds")
    @classmethod
    def validate_refresh_interval(cls, v: int) -> int:
        """Validate the poll interval is not aggressive."""
        if v < 5:
            raise ValueError("refresh_interval_seconds must be at least 5")
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate timezone is a known IANA name."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @field_validator("active_hours_start", "active_hours_end")
    @classmethod
    def validate_time_of_day(cls, v: str) -> str:
        """Validate HH:MM times."""
        parse_minute_of_day(v)
        return v

    @field_validator("active_weekdays")
    @classmethod
    def validate_weekdays(cls, v: str) -> str:
        """Validate the weekday list."""
        parse_weekdays(v)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate logging level name."""
        if v.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("log_level must be DEBUG, INFO, WARNING, ERROR or CRITICAL")
        return v.upper()

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def settings_path(self) -> Path:
        return Path(self.settings_file).expanduser()

    def default_notification_window(self) -> NotificationWindow:
        """Notification window used until the user saves one."""
        return NotificationWindow(
            enabled=self.notifications_enabled,
            start_minute_of_day=parse_minute_of_day(self.active_hours_start),
            end_minute_of_day=parse_minute_of_day(self.active_hours_end),
            active_weekdays=parse_weekdays(self.active_weekdays),
        )

    def load_toml(self) -> dict[str, Any]:
        """Load the TOML file and apply its section values to this config.

        Returns:
            The parsed TOML data, or an empty dict if no file is configured.

        Raises:
            FileNotFoundError: If the configured file does not exist.
        """
        if not self.config_file:
            return {}

        config_path = Path(self.config_file).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)

        for section, fields in _TOML_SECTIONS.items():
            values = toml_data.get(section)
            if not isinstance(values, dict):
                continue
            for name in fields:
                if name not in values:
                    continue
                value = values[name]
                if name == "active_weekdays" and isinstance(value, list):
                    value = ",".join(str(day) for day in value)
                setattr(self, name, value)

        return toml_data
