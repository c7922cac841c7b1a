"""Console presenter writing monitor state to the log."""

import logging
from datetime import datetime, timedelta, tzinfo

from kollektiv_widget.domain.contracts.state_observer import MonitorStateObserverProtocol
from kollektiv_widget.domain.models.departure import Departure
from kollektiv_widget.domain.models.monitor_state import MonitorState

logger = logging.getLogger(__name__)


def format_relative(departure: Departure, now: datetime) -> str:
    """Format time until departure compactly (e.g. 'now', '5m', '1h20m')."""
    delta: timedelta = departure.departure_time - now
    total_minutes = int(delta.total_seconds()) // 60
    if total_minutes <= 0:
        return "now"
    if total_minutes < 60:
        return f"{total_minutes}m"
    hours, minutes = divmod(total_minutes, 60)
    return f"{hours}h" if minutes == 0 else f"{hours}h{minutes}m"


class ConsolePresenter(MonitorStateObserverProtocol):
    """Logs one line per route plus a summary line after every cycle."""

    def __init__(self, timezone: tzinfo | None = None) -> None:
        """Initialize the presenter.

        Args:
            timezone: Timezone for absolute departure times.
        """
        self._timezone = timezone

    def format_departure(self, departure: Departure, now: datetime) -> str:
        local_time = departure.departure_time.astimezone(self._timezone)
        return f"{format_relative(departure, now)} ({local_time:%H:%M})"

    def render(self, state: MonitorState) -> list[str]:
        """Render the state as display lines."""
        lines = []
        for route in state.routes:
            departures = state.departures.get(route.id, ())
            if route.id in state.failed_route_ids:
                times = "update failed"
            elif departures:
                times = ", ".join(self.format_departure(d, state.last_updated) for d in departures)
            else:
                times = "no upcoming departures"
            lines.append(f"{route.transport_mode.label} {route.display_name} @ {route.stop_name}: {times}")

        updated = state.last_updated.astimezone(self._timezone)
        lines.append(
            f"Next: {state.summary.text} | {state.notification_status.status_text} | "
            f"updated {updated:%H:%M:%S}"
        )
        return lines

    def on_state_changed(self, state: MonitorState) -> None:
        if not state.routes:
            logger.info("No routes monitored. Add one with: kollektiv-config add <stop> <line>")
            return
        for line in self.render(state):
            logger.info(line)
