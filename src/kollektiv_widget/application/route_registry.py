"""Registry of monitored routes and their displayed departures."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING

from kollektiv_widget.domain.models.route import clamp_lead_time

if TYPE_CHECKING:
    from kollektiv_widget.domain.models.departure import Departure
    from kollektiv_widget.domain.models.route import Route
    from kollektiv_widget.domain.ports import SettingsStore

logger = logging.getLogger(__name__)

ROUTE_ADDED = "added"
ROUTE_REMOVED = "removed"
ROUTE_UPDATED = "updated"

RegistryListener = Callable[[str, "Route"], None]


class RouteRegistry:
    """Holds the ordered set of monitored routes.

    The route sequence is an immutable tuple that is swapped under a lock on
    every mutation, so readers always see a complete before- or after-state.
    """

    def __init__(self, store: SettingsStore) -> None:
        """Initialize the registry.

        Args:
            store: Settings store used to persist routes.
        """
        self._store = store
        self._routes: tuple[Route, ...] = ()
        self._departures: dict[str, tuple[Departure, ...]] = {}
        self._lock = threading.Lock()
        self._listeners: list[RegistryListener] = []

    def load(self) -> None:
        """Restore routes from the store, migrating the legacy shape if needed."""
        routes = self._read_store()
        with self._lock:
            self._routes = tuple(routes)
            self._departures = {}
        logger.info(f"Loaded {len(routes)} route(s)")

    def sync(self) -> bool:
        """Pick up route changes another process wrote to the store.

        Removed routes lose their cached departures. Listeners receive one
        event per added, removed or updated route.

        Returns:
            True if the stored routes differed from the registry.
        """
        routes = self._read_store()
        with self._lock:
            if tuple(routes) == self._routes:
                return False
            current = {route.id: route for route in self._routes}
            stored_ids = {route.id for route in routes}
            events = [
                (ROUTE_REMOVED, route) for route in self._routes if route.id not in stored_ids
            ]
            for route in routes:
                existing = current.get(route.id)
                if existing is None:
                    events.append((ROUTE_ADDED, route))
                elif existing != route:
                    events.append((ROUTE_UPDATED, route))
            self._routes = tuple(routes)
            for event, route in events:
                if event == ROUTE_REMOVED:
                    self._departures.pop(route.id, None)

        logger.info(f"Routes changed in settings store, now monitoring {len(routes)} route(s)")
        for event, route in events:
            self._notify(event, route)
        return True

    def _read_store(self) -> list[Route]:
        result = self._store.load_routes()
        routes: list[Route] = []
        seen: set[str] = set()
        for route in result.routes:
            if route.id in seen:
                logger.warning(f"Skipping duplicate stored route {route.id}")
                continue
            seen.add(route.id)
            routes.append(route)

        if result.from_legacy:
            logger.info(f"Migrating {len(routes)} legacy monitored line(s) to saved routes")
            self._store.save_routes(routes)
        return routes

    def subscribe(self, listener: RegistryListener) -> None:
        """Register a callback receiving (event, route) after each mutation."""
        self._listeners.append(listener)

    def list(self) -> tuple[Route, ...]:
        return self._routes

    def get(self, route_id: str) -> Route | None:
        for route in self._routes:
            if route.id == route_id:
                return route
        return None

    def add_route(self, route: Route) -> bool:
        """Append a route unless a route with the same id exists.

        Returns:
            True if the route was added, False if it was already present.
        """
        with self._lock:
            if any(existing.id == route.id for existing in self._routes):
                logger.debug(f"Route {route.id} already monitored")
                return False
            if route.notification_lead_time_minutes is not None:
                route = route.with_lead_time(route.notification_lead_time_minutes)
            self._routes = (*self._routes, route)
            snapshot = list(self._routes)

        self._store.save_routes(snapshot)
        logger.info(f"Added route {route.display_name} at {route.stop_name}")
        self._notify(ROUTE_ADDED, route)
        return True

    def remove_route(self, route_id: str) -> bool:
        """Remove a route and its cached departures. Unknown ids are ignored.

        Returns:
            True if a route was removed.
        """
        with self._lock:
            removed = next((r for r in self._routes if r.id == route_id), None)
            if removed is None:
                return False
            self._routes = tuple(r for r in self._routes if r.id != route_id)
            self._departures.pop(route_id, None)
            snapshot = list(self._routes)

        self._store.save_routes(snapshot)
        logger.info(f"Removed route {removed.display_name} at {removed.stop_name}")
        self._notify(ROUTE_REMOVED, removed)
        return True

    def update_lead_time(self, route_id: str, minutes: int) -> bool:
        """Set a route's lead time, clamped to 1-30 minutes.

        Returns:
            True if the route exists.
        """
        minutes = clamp_lead_time(minutes)
        with self._lock:
            updated: Route | None = None
            routes: list[Route] = []
            for route in self._routes:
                if route.id == route_id:
                    updated = route.with_lead_time(minutes)
                    routes.append(updated)
                else:
                    routes.append(route)
            if updated is None:
                return False
            self._routes = tuple(routes)

        self._store.save_routes(routes)
        logger.info(f"Lead time for {updated.display_name} set to {minutes} min")
        self._notify(ROUTE_UPDATED, updated)
        return True

    def set_departures(self, route_id: str, departures: list[Departure]) -> None:
        """Replace the displayed departures of a route."""
        with self._lock:
            if not any(route.id == route_id for route in self._routes):
                # Route was removed while its poll was in flight
                return
            self._departures[route_id] = tuple(departures)

    def departures_for(self, route_id: str) -> tuple[Departure, ...]:
        return self._departures.get(route_id, ())

    def all_departures(self) -> dict[str, tuple[Departure, ...]]:
        with self._lock:
            return dict(self._departures)

    def _notify(self, event: str, route: Route) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, route)
            except Exception as e:
                logger.error(f"Registry listener failed on {event}: {e}", exc_info=True)
