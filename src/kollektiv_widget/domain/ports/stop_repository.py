"""Stop repository port."""

from typing import Protocol

from kollektiv_widget.domain.models.cancellation_token import CancellationToken
from kollektiv_widget.domain.models.stop_search_result import StopSearchResult
from kollektiv_widget.domain.models.transit_line import TransitLine


class StopRepository(Protocol):
    """Port for stop search and per-stop line catalogs."""

    async def search_stops(
        self, text: str, cancellation_token: CancellationToken | None = None
    ) -> list[StopSearchResult]:
        """Search stop places by free text.

        Raises:
            SearchCancelledError: If the token was cancelled while searching.
        """
        ...

    async def get_available_lines(self, stop_id: str) -> list[TransitLine]:
        """List the distinct line + destination pairs serving a stop."""
        ...
