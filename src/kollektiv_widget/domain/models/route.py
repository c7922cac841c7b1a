"""Route domain model."""

from dataclasses import dataclass, replace

from .transit_line import TransitLine
from .transport_mode import TransportMode

DEFAULT_LEAD_TIME_MINUTES = 5
MIN_LEAD_TIME_MINUTES = 1
MAX_LEAD_TIME_MINUTES = 30


def make_route_id(stop_id: str, line_code: str, destination: str) -> str:
    """Build the composite key identifying a (stop, line, destination) triple."""
    return f"{stop_id}-{line_code}-{destination}"


def clamp_lead_time(minutes: int) -> int:
    """Clamp a lead time to the supported range."""
    return max(MIN_LEAD_TIME_MINUTES, min(MAX_LEAD_TIME_MINUTES, minutes))


@dataclass(frozen=True)
class Route:
    """A monitored stop + line + destination with its notification lead time."""

    id: str
    stop_id: str
    stop_name: str
    line_code: str
    line_name: str
    destination: str
    transport_mode: TransportMode
    notification_lead_time_minutes: int | None = None

    @classmethod
    def from_line(
        cls,
        stop_id: str,
        stop_name: str,
        line: TransitLine,
        lead_time_minutes: int | None = None,
    ) -> "Route":
        """Create a route for a line picked from a stop's line catalog."""
        return cls(
            id=make_route_id(stop_id, line.line_code, line.destination),
            stop_id=stop_id,
            stop_name=stop_name,
            line_code=line.line_code,
            line_name=line.line_name,
            destination=line.destination,
            transport_mode=line.transport_mode,
            notification_lead_time_minutes=lead_time_minutes,
        )

    @property
    def effective_lead_time_minutes(self) -> int:
        """Lead time in minutes, falling back to the default."""
        if self.notification_lead_time_minutes is None:
            return DEFAULT_LEAD_TIME_MINUTES
        return self.notification_lead_time_minutes

    @property
    def display_name(self) -> str:
        """Short label such as "31 to Tonsenhagen"."""
        return f"{self.line_code} to {self.destination}"

    def with_lead_time(self, minutes: int) -> "Route":
        """Return a copy with a clamped lead time."""
        return replace(self, notification_lead_time_minutes=clamp_lead_time(minutes))
