"""Notification scheduling and de-duplication for upcoming departures."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime, timedelta, tzinfo
from typing import TYPE_CHECKING

from kollektiv_widget.application.departure_poller import Clock, departure_order, utc_now
from kollektiv_widget.domain.models.departure_notification import DepartureNotification
from kollektiv_widget.domain.models.notification_window import NotificationWindow

if TYPE_CHECKING:
    from kollektiv_widget.domain.models.departure import Departure
    from kollektiv_widget.domain.models.notification_record import NotificationRecord
    from kollektiv_widget.domain.models.notification_status import NotificationStatus
    from kollektiv_widget.domain.models.route import Route
    from kollektiv_widget.domain.ports import NotificationSink, SettingsStore

logger = logging.getLogger(__name__)

DELIVERY_FAILURE_GUIDANCE = (
    "Departure notifications could not be delivered. Check that notifications are "
    "allowed for this application in your system notification settings."
)


def should_notify(departure: Departure, lead_time_minutes: int, now: datetime) -> bool:
    """Check whether a departure is inside the (0, lead time] minute window."""
    minutes_until = departure.minutes_until(now)
    return 0 < minutes_until <= lead_time_minutes


def build_notification(route: Route, departure: Departure, now: datetime) -> DepartureNotification:
    """Render the notification text for a departure."""
    minutes = departure.minutes_until(now)
    unit = "minute" if minutes == 1 else "minutes"
    return DepartureNotification(
        route_id=route.id,
        notification_id=departure.notification_id,
        title=f"{departure.transport_mode.label} departure",
        body=(
            f"Line {departure.line_code} to {departure.destination} leaves in "
            f"{minutes} {unit} from {route.stop_name}"
        ),
    )


class NotificationScheduler:
    """Decides which departures trigger a notification, at most once per trip."""

    def __init__(
        self,
        sink: NotificationSink,
        store: SettingsStore,
        default_window: NotificationWindow | None = None,
        clear_interval: timedelta = timedelta(hours=24),
        timezone: tzinfo | None = None,
        sound: str | None = "default",
        clock: Clock = utc_now,
        on_delivery_failure: Callable[[str], None] | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            sink: Where notifications are delivered.
            store: Settings store holding the window and the de-dup record.
            default_window: Window used when the store has none saved.
            clear_interval: How long notified ids are remembered before a wholesale clear.
            timezone: Timezone in which the active-hours window is evaluated.
            sound: Sound reference passed to the sink.
            clock: Source of the current time (timezone-aware).
            on_delivery_failure: Called once with guidance text when delivery starts failing.
        """
        self._sink = sink
        self._store = store
        self._default_window = default_window or NotificationWindow()
        self._clear_interval = clear_interval
        self._timezone = timezone
        self._sound = sound
        self._clock = clock
        self._on_delivery_failure = on_delivery_failure
        self._record: NotificationRecord = store.load_notification_record()
        self._failure_reported = False

    @property
    def record(self) -> NotificationRecord:
        return self._record

    def current_window(self) -> NotificationWindow:
        return self._store.load_notification_window() or self._default_window

    def gate_status(self, now: datetime | None = None) -> NotificationStatus:
        """Evaluate the global notification gate at the given time."""
        now = now or self._clock()
        local_now = now.astimezone(self._timezone) if self._timezone else now
        return self.current_window().status(local_now)

    def maintain_record(self, now: datetime | None = None) -> bool:
        """Wipe the de-dup set once the clear interval has elapsed.

        Returns:
            True if the set was cleared.
        """
        now = now or self._clock()
        if self._record.last_cleared is None:
            self._record.last_cleared = now
            self._store.save_notification_record(self._record)
            return False
        if not self._record.is_clear_due(now, self._clear_interval):
            return False

        logger.info(
            f"Clearing {len(self._record)} notified departure id(s), "
            f"last cleared at {self._record.last_cleared.isoformat()}"
        )
        self._record.clear(now)
        self._store.save_notification_record(self._record)
        return True

    async def evaluate(
        self,
        routes: Sequence[Route],
        departures_by_route_id: Mapping[str, Sequence[Departure]],
        now: datetime | None = None,
    ) -> list[DepartureNotification]:
        """Run one scheduling cycle over freshly polled departures.

        Args:
            routes: Monitored routes.
            departures_by_route_id: Full filtered departures per route (before display truncation).
            now: Evaluation time, defaults to the clock.

        Returns:
            Notifications that were delivered in this cycle.
        """
        now = now or self._clock()
        self.maintain_record(now)

        status = self.gate_status(now)
        if not status.is_enabled:
            logger.debug(f"Notifications gated: {status.status_text}")
            return []

        delivered: list[DepartureNotification] = []
        for route in routes:
            lead_time = route.effective_lead_time_minutes
            departures = sorted(departures_by_route_id.get(route.id, ()), key=departure_order)
            for departure in departures:
                if not should_notify(departure, lead_time, now):
                    continue
                if departure.notification_id in self._record:
                    continue
                notification = build_notification(route, departure, now)
                if await self._deliver(notification):
                    self._record.mark_notified(notification.notification_id)
                    self._store.save_notification_record(self._record)
                    delivered.append(notification)

        if delivered:
            logger.info(f"Sent {len(delivered)} departure notification(s)")
        return delivered

    async def send_test_notification(self) -> bool:
        """Send a sample notification, bypassing the window and de-dup set."""
        return await self._send(
            "Test notification",
            "Bus 74 to Mortensrud leaves in 5 minutes!",
        )

    async def _deliver(self, notification: DepartureNotification) -> bool:
        delivered = await self._send(notification.title, notification.body)
        if delivered:
            logger.info(f"Notified: {notification.body}")
        return delivered

    async def _send(self, title: str, body: str) -> bool:
        try:
            delivered = await self._sink.send(title, body, self._sound)
        except Exception as e:
            logger.error(f"Notification sink raised: {e}", exc_info=True)
            delivered = False

        if delivered:
            self._failure_reported = False
            return True

        if not self._failure_reported:
            self._failure_reported = True
            logger.warning(DELIVERY_FAILURE_GUIDANCE)
            if self._on_delivery_failure is not None:
                self._on_delivery_failure(DELIVERY_FAILURE_GUIDANCE)
        else:
            logger.debug(f"Notification not delivered: {title}")
        return False
