"""Entur stop repository adapter."""

import logging
from typing import TYPE_CHECKING, Any

from kollektiv_widget.adapters.entur_api.constants import (
    ESTIMATED_CALLS_QUERY,
    STOP_CATEGORIES,
    STOP_PLACE_ID_PREFIX,
)
from kollektiv_widget.adapters.entur_api.departure_parser import parse_available_lines
from kollektiv_widget.domain.models.cancellation_token import CancellationToken
from kollektiv_widget.domain.models.stop_search_result import StopSearchResult
from kollektiv_widget.domain.models.transit_line import TransitLine
from kollektiv_widget.domain.ports.stop_repository import StopRepository

if TYPE_CHECKING:
    from kollektiv_widget.adapters.entur_api.http_client import EnturHttpClient

logger = logging.getLogger(__name__)


def _is_stop_place(properties: dict[str, Any]) -> bool:
    categories = properties.get("category") or []
    stop_id = str(properties.get("id", ""))
    return bool(STOP_CATEGORIES.intersection(categories)) and stop_id.startswith(
        STOP_PLACE_ID_PREFIX
    )


def parse_search_results(body: dict[str, Any]) -> list[StopSearchResult]:
    """Keep stop-like geocoder features and convert them to search results."""
    results: list[StopSearchResult] = []
    for feature in body.get("features") or []:
        properties = feature.get("properties") if isinstance(feature, dict) else None
        if not isinstance(properties, dict) or not _is_stop_place(properties):
            continue
        name = properties.get("name", "")
        results.append(
            StopSearchResult(
                id=properties["id"],
                name=name,
                label=properties.get("label") or name,
            )
        )
    return results


class EnturStopRepository(StopRepository):
    """Adapter for stop search (geocoder) and line catalogs (journey planner)."""

    def __init__(
        self,
        http_client: "EnturHttpClient",
        search_size: int = 10,
        search_language: str = "no",
        lines_lookahead: int = 50,
    ) -> None:
        """Initialize the repository.

        Args:
            http_client: Entur HTTP client.
            search_size: Maximum number of geocoder results.
            search_language: Geocoder result language.
            lines_lookahead: Number of upcoming calls sampled to build a line catalog.
        """
        self._http_client = http_client
        self._search_size = search_size
        self._search_language = search_language
        self._lines_lookahead = lines_lookahead

    async def search_stops(
        self, text: str, cancellation_token: CancellationToken | None = None
    ) -> list[StopSearchResult]:
        """Search stop places by free text."""
        if not text.strip():
            return []
        if cancellation_token is not None:
            cancellation_token.raise_if_cancelled()

        body = await self._http_client.geocode(
            {"text": text, "size": self._search_size, "lang": self._search_language}
        )

        if cancellation_token is not None:
            cancellation_token.raise_if_cancelled()
        results = parse_search_results(body)
        logger.debug(f"Stop search {text!r} returned {len(results)} stop place(s)")
        return results

    async def get_available_lines(self, stop_id: str) -> list[TransitLine]:
        """List the distinct lines and destinations departing from a stop."""
        data = await self._http_client.graphql(
            ESTIMATED_CALLS_QUERY,
            {"stopId": stop_id, "numberOfDepartures": self._lines_lookahead},
        )
        lines = parse_available_lines(data)
        logger.debug(f"Found {len(lines)} line(s) at {stop_id}")
        return lines
