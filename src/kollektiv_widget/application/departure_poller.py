"""Departure poller for monitored routes."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from kollektiv_widget.domain.models.error_details import ErrorDetails

if TYPE_CHECKING:
    from kollektiv_widget.domain.models.departure import Departure
    from kollektiv_widget.domain.models.route import Route
    from kollektiv_widget.domain.ports import DepartureRepository

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def extract_error_details(error: BaseException) -> ErrorDetails:
    """Extract HTTP status code and error reason from exception."""
    status_code = getattr(error, "status_code", None) or getattr(error, "status", None)
    if not isinstance(status_code, int):
        # Format: "Entur API returned status 502"
        status_match = re.search(r"\b(\d{3})\b", str(error))
        status_code = int(status_match.group(1)) if status_match else None

    if isinstance(error, TimeoutError):
        reason = "Request timed out"
    elif status_code == 429:
        reason = "Rate limit exceeded"
    elif status_code == 502:
        reason = "Bad gateway (server error)"
    elif status_code == 503:
        reason = "Service unavailable"
    elif status_code == 504:
        reason = "Gateway timeout"
    elif status_code is not None:
        reason = f"HTTP {status_code}"
    else:
        reason = "Unknown error"

    return ErrorDetails(status_code=status_code, reason=reason)


def departure_order(departure: Departure) -> tuple[datetime, str]:
    """Sort key: departure time, ties broken by notification identifier."""
    return (departure.departure_time, departure.notification_id)


class DeparturePoller:
    """Fetches and filters upcoming departures per route."""

    def __init__(
        self,
        departure_repository: DepartureRepository,
        fetch_limit: int = 20,
        max_parallel_polls: int = 8,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize the poller.

        Args:
            departure_repository: Repository for fetching departures at a stop.
            fetch_limit: Number of departures requested per stop.
            max_parallel_polls: Upper bound on concurrent route fetches.
            clock: Source of the current time (timezone-aware).
        """
        self._departure_repository = departure_repository
        self._fetch_limit = fetch_limit
        self._max_parallel_polls = max(1, max_parallel_polls)
        self._clock = clock
        self.last_failed_route_ids: frozenset[str] = frozenset()

    async def _fetch_route(self, route: Route) -> list[Departure] | None:
        """Fetch and filter departures for a route, or None if the backend failed."""
        try:
            raw_departures = await self._departure_repository.get_departures(
                route.stop_id, limit=self._fetch_limit
            )
        except Exception as e:
            error_details = extract_error_details(e)
            logger.error(
                f"Failed to fetch departures for {route.display_name} at {route.stop_name}: "
                f"{error_details.reason} (status: {error_details.status_code}, error: {e})"
            )
            return None

        now = self._clock()
        departures = [
            departure
            for departure in raw_departures
            if departure.line_code == route.line_code
            and departure.destination == route.destination
            and departure.departure_time >= now
        ]
        departures.sort(key=departure_order)
        logger.debug(
            f"{len(departures)} of {len(raw_departures)} departures match {route.display_name}"
        )
        return departures

    async def poll_route(self, route: Route) -> list[Departure]:
        """Get upcoming departures for one route, earliest first.

        Backend failures are logged and yield an empty list.
        """
        departures = await self._fetch_route(route)
        return departures if departures is not None else []

    async def poll_all(self, routes: Iterable[Route]) -> dict[str, list[Departure]]:
        """Poll every route independently with bounded concurrency.

        Returns:
            Mapping of route id to its filtered departures. Failed routes map
            to an empty list and are listed in ``last_failed_route_ids``.
        """
        semaphore = asyncio.Semaphore(self._max_parallel_polls)
        failed: set[str] = set()

        async def poll_one(route: Route) -> tuple[str, list[Departure]]:
            async with semaphore:
                departures = await self._fetch_route(route)
            if departures is None:
                failed.add(route.id)
                return route.id, []
            return route.id, departures

        route_list = list(routes)
        results = await asyncio.gather(*(poll_one(route) for route in route_list))
        self.last_failed_route_ids = frozenset(failed)
        if failed:
            logger.warning(f"{len(failed)} of {len(route_list)} route(s) failed to update")
        return dict(results)
