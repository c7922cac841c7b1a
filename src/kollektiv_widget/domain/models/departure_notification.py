"""Departure notification domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DepartureNotification:
    """A notification emitted for one departure of a route."""

    route_id: str
    notification_id: str
    title: str
    body: str
