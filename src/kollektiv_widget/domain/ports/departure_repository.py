"""Departure repository port."""

from typing import Protocol

from kollektiv_widget.domain.models.departure import Departure


class DepartureRepository(Protocol):
    """Port for retrieving upcoming departures at a stop."""

    async def get_departures(self, stop_id: str, limit: int = 20) -> list[Departure]:
        """Get raw upcoming departures for a stop, across all lines."""
        ...
