"""Debounced, cancellable stop search."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from kollektiv_widget.application.departure_poller import extract_error_details
from kollektiv_widget.domain.models.cancellation_token import (
    CancellationToken,
    SearchCancelledError,
)

if TYPE_CHECKING:
    from kollektiv_widget.domain.models.stop_search_result import StopSearchResult
    from kollektiv_widget.domain.models.transit_line import TransitLine
    from kollektiv_widget.domain.ports import StopRepository

logger = logging.getLogger(__name__)


class StopSearchService:
    """Searches stops; a new search supersedes any search still in flight."""

    def __init__(self, stop_repository: StopRepository, debounce_seconds: float = 0.5) -> None:
        """Initialize the service.

        Args:
            stop_repository: Repository used for searches and line catalogs.
            debounce_seconds: Quiet period before a search is sent.
        """
        self._stop_repository = stop_repository
        self._debounce_seconds = debounce_seconds
        self._current_token: CancellationToken | None = None

    def cancel(self) -> None:
        """Cancel the search in flight, if any."""
        if self._current_token is not None:
            self._current_token.cancel()
            self._current_token = None

    async def search(self, text: str) -> list[StopSearchResult] | None:
        """Search stops by free text.

        Returns:
            Matching stops, an empty list for blank text or backend failure,
            or None if a newer search superseded this one.
        """
        self.cancel()
        if not text.strip():
            return []

        token = CancellationToken()
        self._current_token = token

        if self._debounce_seconds > 0:
            await asyncio.sleep(self._debounce_seconds)
        if token.is_cancelled:
            return None

        try:
            results = await self._stop_repository.search_stops(text, cancellation_token=token)
        except SearchCancelledError:
            return None
        except Exception as e:
            if token.is_cancelled:
                return None
            error_details = extract_error_details(e)
            logger.error(f"Stop search for {text!r} failed: {error_details.reason} ({e})")
            return []

        if token.is_cancelled:
            logger.debug(f"Discarding stale results for {text!r}")
            return None
        if self._current_token is token:
            self._current_token = None
        return results

    async def available_lines(self, stop_id: str) -> list[TransitLine]:
        """List lines serving a stop; backend failures yield an empty list."""
        try:
            return await self._stop_repository.get_available_lines(stop_id)
        except Exception as e:
            error_details = extract_error_details(e)
            logger.error(f"Failed to load lines for {stop_id}: {error_details.reason} ({e})")
            return []
