"""Parsing of Entur journey planner responses into domain models."""

import logging
from datetime import datetime
from typing import Any

from kollektiv_widget.domain.models.departure import Departure
from kollektiv_widget.domain.models.transit_line import TransitLine
from kollektiv_widget.domain.models.transport_mode import TransportMode

logger = logging.getLogger(__name__)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO 8601 timestamp with offset; naive or invalid values yield None."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return None
    return parsed


def _line_of(call: dict[str, Any]) -> dict[str, Any]:
    service_journey = call.get("serviceJourney") or {}
    return service_journey.get("line") or {}


def _trip_id(call: dict[str, Any]) -> str | None:
    """Service journey id qualified by operating date.

    A service journey id repeats every day it runs, so the date keeps the
    identifier unique per actual trip.
    """
    service_journey_id = (call.get("serviceJourney") or {}).get("id")
    if not service_journey_id:
        return None
    operating_date = call.get("date")
    return f"{service_journey_id}:{operating_date}" if operating_date else service_journey_id


def _destination_of(call: dict[str, Any]) -> str:
    return (call.get("destinationDisplay") or {}).get("frontText") or ""


def estimated_calls(data: dict[str, Any]) -> tuple[str, list[dict[str, Any]]]:
    """Extract the stop name and raw estimated calls from a ``data`` object."""
    stop_place = data.get("stopPlace")
    if not isinstance(stop_place, dict):
        return "", []
    calls = stop_place.get("estimatedCalls") or []
    return stop_place.get("name") or "", [call for call in calls if isinstance(call, dict)]


def parse_departures(data: dict[str, Any]) -> list[Departure]:
    """Convert estimated calls into departures, dropping calls without a valid time."""
    stop_name, calls = estimated_calls(data)
    departures: list[Departure] = []
    for call in calls:
        departure_time = parse_timestamp(call.get("expectedDepartureTime"))
        if departure_time is None:
            logger.debug(f"Dropping call without parseable time at {stop_name}")
            continue
        line = _line_of(call)
        departures.append(
            Departure(
                line_code=line.get("publicCode") or "",
                destination=_destination_of(call),
                departure_time=departure_time,
                transport_mode=TransportMode.from_api(line.get("transportMode")),
                stop_name=stop_name,
                trip_id=_trip_id(call),
            )
        )
    return departures


def parse_available_lines(data: dict[str, Any]) -> list[TransitLine]:
    """Distinct (line code, destination) pairs, ordered for display."""
    _, calls = estimated_calls(data)
    seen: set[tuple[str, str]] = set()
    lines: list[TransitLine] = []
    for call in calls:
        line = _line_of(call)
        line_code = line.get("publicCode") or ""
        destination = _destination_of(call)
        key = (line_code, destination)
        if not line_code or key in seen:
            continue
        seen.add(key)
        lines.append(
            TransitLine(
                line_code=line_code,
                line_name=line.get("name") or line_code,
                destination=destination,
                transport_mode=TransportMode.from_api(line.get("transportMode")),
            )
        )
    return sorted(lines, key=lambda item: item.sort_key)
