"""Status summary domain model."""

from dataclasses import dataclass

from .transport_mode import TransportMode

NO_DEPARTURES_TEXT = "—"


@dataclass(frozen=True)
class StatusSummary:
    """Compact "next departure" text for a status bar."""

    text: str = NO_DEPARTURES_TEXT
    transport_mode: TransportMode | None = None
