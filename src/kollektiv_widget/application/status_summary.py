"""Next-departure summary for status displays."""

from collections.abc import Iterable, Mapping
from datetime import datetime

from kollektiv_widget.domain.models.departure import Departure
from kollektiv_widget.domain.models.status_summary import StatusSummary


def next_departure(
    departures_by_route_id: Mapping[str, Iterable[Departure]], now: datetime
) -> Departure | None:
    """Find the earliest departure that has not left yet."""
    upcoming = [
        departure
        for departures in departures_by_route_id.values()
        for departure in departures
        if departure.departure_time >= now
    ]
    return min(upcoming, key=lambda d: d.departure_time, default=None)


def summarize(
    departures_by_route_id: Mapping[str, Iterable[Departure]], now: datetime
) -> StatusSummary:
    """Render "Now" or "<n>m" for the next departure, or a dash if there is none."""
    departure = next_departure(departures_by_route_id, now)
    if departure is None:
        return StatusSummary()
    minutes = max(departure.minutes_until(now), 0)
    text = "Now" if minutes == 0 else f"{minutes}m"
    return StatusSummary(text=text, transport_mode=departure.transport_mode)
