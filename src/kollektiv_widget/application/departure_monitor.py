"""Periodic poll-evaluate-notify cycle for monitored routes."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from kollektiv_widget.application.departure_poller import Clock, utc_now
from kollektiv_widget.application.route_registry import ROUTE_ADDED
from kollektiv_widget.application.status_summary import summarize
from kollektiv_widget.domain.contracts.departure_monitor import DepartureMonitorProtocol
from kollektiv_widget.domain.models.monitor_state import MonitorState

if TYPE_CHECKING:
    from datetime import datetime

    from kollektiv_widget.application.departure_poller import DeparturePoller
    from kollektiv_widget.application.notification_scheduler import NotificationScheduler
    from kollektiv_widget.application.route_registry import RouteRegistry
    from kollektiv_widget.domain.contracts.state_observer import MonitorStateObserverProtocol
    from kollektiv_widget.domain.models.route import Route

logger = logging.getLogger(__name__)


class DepartureMonitor(DepartureMonitorProtocol):
    """Polls departures on a fixed period, schedules notifications and publishes state."""

    def __init__(
        self,
        registry: RouteRegistry,
        poller: DeparturePoller,
        scheduler: NotificationScheduler,
        refresh_interval_seconds: float = 15,
        departures_per_route: int = 3,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize the monitor.

        Args:
            registry: Registry of monitored routes.
            poller: Poller fetching departures per route.
            scheduler: Scheduler deciding which departures notify.
            refresh_interval_seconds: Seconds between poll cycles.
            departures_per_route: Number of departures kept per route for display.
            clock: Source of the current time (timezone-aware).
        """
        self.registry = registry
        self.poller = poller
        self.scheduler = scheduler
        self.refresh_interval_seconds = refresh_interval_seconds
        self.departures_per_route = departures_per_route
        self._clock = clock
        self._observers: list[MonitorStateObserverProtocol] = []
        self._cycle_lock = asyncio.Lock()
        self._wake = asyncio.Event()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._task: asyncio.Task | None = None
        self.last_state: MonitorState | None = None

        registry.subscribe(self._on_registry_event)

    def subscribe(self, observer: MonitorStateObserverProtocol) -> None:
        """Register an observer for state published after each cycle."""
        self._observers.append(observer)

    async def start(self) -> None:
        """Start the monitor."""
        if self._task is not None and not self._task.done():
            logger.warning("Departure monitor already running")
            return

        self._loop = asyncio.get_running_loop()
        self._task = asyncio.create_task(self._poll_loop())
        logger.info(
            f"Started departure monitor ({len(self.registry.list())} route(s), "
            f"every {self.refresh_interval_seconds}s)"
        )

    async def stop(self) -> None:
        """Stop the monitor."""
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                logger.info("Departure monitor cancelled")
            logger.info("Stopped departure monitor")

    def request_refresh(self) -> None:
        """Wake the poll loop for an immediate cycle. Safe to call from any thread."""
        if self._loop is None or self._loop.is_closed():
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._wake.set()
        else:
            self._loop.call_soon_threadsafe(self._wake.set)

    async def _poll_loop(self) -> None:
        """Main polling loop."""
        # Do initial update immediately
        await self._run_cycle_with_error_handling()

        try:
            while True:
                try:
                    await asyncio.wait_for(self._wake.wait(), timeout=self.refresh_interval_seconds)
                except TimeoutError:
                    pass
                self._wake.clear()
                await self._run_cycle_with_error_handling()
        except asyncio.CancelledError:
            logger.info("Departure monitor cancelled")
            raise

    async def _run_cycle_with_error_handling(self) -> None:
        try:
            await self.run_cycle()
        except Exception as e:
            # Log error but continue the loop - don't stop polling on errors
            logger.error(f"Error in departure monitor cycle (will retry): {e}", exc_info=True)

    async def run_cycle(self, now: datetime | None = None) -> MonitorState:
        """Poll all routes, evaluate notifications, then publish the display state."""
        async with self._cycle_lock:
            if self.registry.sync():
                # Routes picked up here are polled in this cycle
                self._wake.clear()
            routes = self.registry.list()
            departures_by_route_id = await self.poller.poll_all(routes)
            now = now or self._clock()

            # Evaluate against the full filtered lists before truncating for display
            await self.scheduler.evaluate(routes, departures_by_route_id, now)

            for route in routes:
                displayed = departures_by_route_id.get(route.id, [])[: self.departures_per_route]
                self.registry.set_departures(route.id, displayed)

            state = self._build_state(now)
            self.last_state = state
            logger.debug(
                f"Cycle complete at {now.isoformat()}: {len(routes)} route(s), "
                f"{len(self.poller.last_failed_route_ids)} failed"
            )

        self._publish(state)
        return state

    async def refresh_route(self, route: Route) -> MonitorState:
        """Poll a single route and publish the updated state, without notifying."""
        async with self._cycle_lock:
            departures = await self.poller.poll_route(route)
            self.registry.set_departures(route.id, departures[: self.departures_per_route])
            state = self._build_state(self._clock())
            self.last_state = state
        self._publish(state)
        return state

    def _build_state(self, now: datetime) -> MonitorState:
        displayed = self.registry.all_departures()
        return MonitorState(
            routes=self.registry.list(),
            departures=displayed,
            last_updated=now,
            notification_status=self.scheduler.gate_status(now),
            summary=summarize(displayed, now),
            failed_route_ids=self.poller.last_failed_route_ids,
        )

    def _publish(self, state: MonitorState) -> None:
        for observer in list(self._observers):
            try:
                observer.on_state_changed(state)
            except Exception as e:
                logger.error(f"Failed to publish monitor state: {e}", exc_info=True)

    def _on_registry_event(self, event: str, route: Route) -> None:
        if event == ROUTE_ADDED:
            logger.debug(f"Route {route.id} added, requesting immediate refresh")
            self.request_refresh()
