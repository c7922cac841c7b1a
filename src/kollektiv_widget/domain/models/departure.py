"""Departure domain model."""

import math
from dataclasses import dataclass
from datetime import datetime

from .transport_mode import TransportMode


@dataclass(frozen=True)
class Departure:
    """Represents a single upcoming call at a stop."""

    line_code: str
    destination: str
    departure_time: datetime  # Timezone-aware, absolute
    transport_mode: TransportMode
    stop_name: str
    trip_id: str | None = None  # Backend trip identifier, when the backend provides one

    def minutes_until(self, now: datetime) -> int:
        """Whole minutes from now until departure, rounded down."""
        return math.floor((self.departure_time - now).total_seconds() / 60)

    @property
    def notification_id(self) -> str:
        """Stable identifier used to de-duplicate notifications.

        Prefers the backend trip identifier; otherwise derives one from
        line, destination and departure timestamp.
        """
        if self.trip_id:
            return self.trip_id
        return f"{self.line_code}-{self.destination}-{int(self.departure_time.timestamp())}"
