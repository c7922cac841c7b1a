"""Settings store backed by a single JSON document on disk."""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from kollektiv_widget.adapters.storage.schemas import (
    LEGACY_LEAD_TIME_KEY,
    LEGACY_MONITORED_LINES_KEY,
    SAVED_ROUTES_KEY,
    LegacyLineRecord,
    NotificationRecordSchema,
    PreferencesSchema,
    RouteRecord,
    WindowRecord,
)
from kollektiv_widget.domain.models.notification_record import NotificationRecord
from kollektiv_widget.domain.models.notification_window import NotificationWindow
from kollektiv_widget.domain.models.preferences import Preferences
from kollektiv_widget.domain.models.route import Route
from kollektiv_widget.domain.ports.settings_store import RouteLoadResult

logger = logging.getLogger(__name__)

_ROUTES_ADAPTER = TypeAdapter(list[RouteRecord])
_LEGACY_LINES_ADAPTER = TypeAdapter(list[LegacyLineRecord])

_LEGACY_WINDOW_KEYS = (
    "notificationStartHour",
    "notificationStartMinute",
    "notificationEndHour",
    "notificationEndMinute",
    "selectedWeekdays",
)


class JsonSettingsStore:
    """Typed settings persisted as one JSON object.

    Each save rewrites the whole document through a temporary file in the
    same directory followed by ``os.replace``, so readers never observe a
    half-written file.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read settings file {self.path}, using defaults: {e}")
            return {}
        if not isinstance(document, dict):
            logger.warning(f"Settings file {self.path} does not hold an object, using defaults")
            return {}
        return document

    def _write(self, document: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, sort_keys=True)
                f.write("\n")
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _update(self, values: dict[str, Any], remove: tuple[str, ...] = ()) -> None:
        with self._lock:
            document = self._read()
            for key in remove:
                document.pop(key, None)
            document.update(values)
            self._write(document)

    def load_routes(self) -> RouteLoadResult:
        """Load saved routes, falling back to the legacy monitored-lines list."""
        document = self._read()

        if SAVED_ROUTES_KEY in document:
            try:
                records = _ROUTES_ADAPTER.validate_python(document[SAVED_ROUTES_KEY])
                return RouteLoadResult(routes=[record.to_route() for record in records])
            except (ValidationError, ValueError) as e:
                logger.warning(f"Saved routes are unreadable, trying legacy lines: {e}")

        if LEGACY_MONITORED_LINES_KEY in document:
            global_lead_time = document.get(LEGACY_LEAD_TIME_KEY)
            if not isinstance(global_lead_time, int):
                global_lead_time = None
            try:
                legacy = _LEGACY_LINES_ADAPTER.validate_python(document[LEGACY_MONITORED_LINES_KEY])
            except ValidationError as e:
                logger.warning(f"Legacy monitored lines are unreadable, starting empty: {e}")
                return RouteLoadResult()
            routes = [record.to_route(global_lead_time) for record in legacy]
            logger.info(f"Migrating {len(routes)} route(s) from legacy monitored lines")
            return RouteLoadResult(routes=routes, from_legacy=True)

        return RouteLoadResult()

    def save_routes(self, routes: list[Route]) -> None:
        payload = _ROUTES_ADAPTER.dump_python(
            [RouteRecord.from_route(route) for route in routes], by_alias=True, mode="json"
        )
        self._update(
            {SAVED_ROUTES_KEY: payload},
            remove=(LEGACY_MONITORED_LINES_KEY, LEGACY_LEAD_TIME_KEY),
        )

    def load_notification_window(self) -> NotificationWindow | None:
        try:
            record = WindowRecord.model_validate(self._read())
        except ValidationError as e:
            logger.warning(f"Notification window settings are unreadable: {e}")
            return None
        if record.is_empty:
            return None
        try:
            return record.to_window(NotificationWindow())
        except ValueError as e:
            logger.warning(f"Notification window settings are out of range: {e}")
            return None

    def save_notification_window(self, window: NotificationWindow) -> None:
        self._update(WindowRecord.from_window(window).current_keys(), remove=_LEGACY_WINDOW_KEYS)

    def load_notification_record(self) -> NotificationRecord:
        try:
            return NotificationRecordSchema.model_validate(self._read()).to_record()
        except ValidationError as e:
            logger.warning(f"Notified departure ids are unreadable, starting empty: {e}")
            return NotificationRecord()

    def save_notification_record(self, record: NotificationRecord) -> None:
        self._update(
            NotificationRecordSchema.from_record(record).model_dump(by_alias=True, mode="json")
        )

    def load_preferences(self) -> Preferences:
        try:
            return PreferencesSchema.model_validate(self._read()).to_preferences()
        except ValidationError as e:
            logger.warning(f"Preferences are unreadable, using defaults: {e}")
            return Preferences()

    def save_preferences(self, preferences: Preferences) -> None:
        self._update(
            PreferencesSchema.from_preferences(preferences).model_dump(by_alias=True, mode="json")
        )
