"""Entur departure repository adapter."""

import logging
from typing import TYPE_CHECKING

from kollektiv_widget.adapters.entur_api.constants import ESTIMATED_CALLS_QUERY
from kollektiv_widget.adapters.entur_api.departure_parser import parse_departures
from kollektiv_widget.domain.models.departure import Departure
from kollektiv_widget.domain.ports.departure_repository import DepartureRepository

if TYPE_CHECKING:
    from kollektiv_widget.adapters.entur_api.http_client import EnturHttpClient

logger = logging.getLogger(__name__)


class EnturDepartureRepository(DepartureRepository):
    """Adapter fetching estimated calls from the Entur journey planner."""

    def __init__(self, http_client: "EnturHttpClient") -> None:
        self._http_client = http_client

    async def get_departures(self, stop_id: str, limit: int = 20) -> list[Departure]:
        """Get upcoming departures for a stop place."""
        data = await self._http_client.graphql(
            ESTIMATED_CALLS_QUERY, {"stopId": stop_id, "numberOfDepartures": limit}
        )
        departures = parse_departures(data)
        logger.debug(f"Fetched {len(departures)} departures for {stop_id}")
        return departures
