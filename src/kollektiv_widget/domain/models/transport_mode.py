"""Transport mode domain model."""

from enum import Enum

# Entur reports modes that the widget folds into its five display modes.
_API_MODE_ALIASES = {
    "rail": "train",
    "water": "ferry",
    "coach": "bus",
}

_PRIORITIES = {
    "metro": 1,
    "tram": 2,
    "bus": 3,
}


class TransportMode(str, Enum):
    """Mode of a transit line."""

    BUS = "bus"
    TRAM = "tram"
    METRO = "metro"
    TRAIN = "train"
    FERRY = "ferry"

    @classmethod
    def from_api(cls, value: str | None) -> "TransportMode":
        """Map a backend transport mode string to a TransportMode.

        Unknown or missing modes fall back to bus.
        """
        if not value:
            return cls.BUS
        normalized = value.strip().lower()
        normalized = _API_MODE_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            return cls.BUS

    @property
    def priority(self) -> int:
        """Sort priority for line listings (metro < tram < bus < others)."""
        return _PRIORITIES.get(self.value, 4)

    @property
    def label(self) -> str:
        """Human readable label."""
        return self.value.capitalize()
