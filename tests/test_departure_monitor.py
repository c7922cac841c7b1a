"""Tests for the poll-evaluate-notify cycle."""

import asyncio
from pathlib import Path

import pytest

from kollektiv_widget.adapters.storage import InMemorySettingsStore, JsonSettingsStore
from kollektiv_widget.application import (
    DepartureMonitor,
    DeparturePoller,
    NotificationScheduler,
    RouteRegistry,
)
from kollektiv_widget.domain.models import NotificationWindow
from tests.fakes import (
    BASE_TIME,
    STOP_ID,
    FakeClock,
    FakeDepartureRepository,
    RecordingObserver,
    RecordingSink,
    make_departure,
    make_route,
)

ALWAYS = NotificationWindow(
    start_minute_of_day=0, end_minute_of_day=1439, active_weekdays=frozenset(range(1, 8))
)


def build_monitor(
    repository: FakeDepartureRepository,
    routes: list | None = None,
    window: NotificationWindow = ALWAYS,
    refresh_interval_seconds: float = 15,
) -> tuple[DepartureMonitor, RouteRegistry, RecordingSink, FakeClock]:
    clock = FakeClock()
    store = InMemorySettingsStore(routes=routes or [], window=window)
    registry = RouteRegistry(store)
    registry.load()
    sink = RecordingSink()
    monitor = DepartureMonitor(
        registry,
        DeparturePoller(repository, clock=clock),
        NotificationScheduler(sink, store, clock=clock),
        refresh_interval_seconds=refresh_interval_seconds,
        departures_per_route=3,
        clock=clock,
    )
    return monitor, registry, sink, clock


@pytest.mark.asyncio
async def test_cycle_notifies_once_across_polls() -> None:
    """Given departures at +3 and +12 minutes, when polling twice 10s apart, then one notification total."""
    route = make_route(lead_time=5)
    repository = FakeDepartureRepository(
        {STOP_ID: [make_departure(3, trip_id="soon"), make_departure(12, trip_id="later")]}
    )
    monitor, _, sink, clock = build_monitor(repository, [route])

    state = await monitor.run_cycle()
    clock.advance(seconds=10)
    await monitor.run_cycle()

    assert len(sink.sent) == 1
    assert sink.sent[0][1] == "Line 31 to Tonsenhagen leaves in 3 minutes from Jernbanetorget"
    assert [d.trip_id for d in state.departures[route.id]] == ["soon", "later"]
    assert state.summary.text == "3m"
    assert state.notification_status.is_enabled


@pytest.mark.asyncio
async def test_display_truncation_happens_after_evaluation() -> None:
    """Given five departures inside the lead time, when cycling, then all notify but three are displayed."""
    route = make_route(lead_time=30)
    repository = FakeDepartureRepository(
        {STOP_ID: [make_departure(m, trip_id=f"t{m}") for m in (2, 4, 6, 8, 10)]}
    )
    monitor, registry, sink, _ = build_monitor(repository, [route])

    state = await monitor.run_cycle()

    assert len(sink.sent) == 5
    assert [d.trip_id for d in state.departures[route.id]] == ["t2", "t4", "t6"]
    assert len(registry.departures_for(route.id)) == 3


@pytest.mark.asyncio
async def test_cycle_publishes_state_to_observers() -> None:
    route = make_route()
    monitor, _, _, _ = build_monitor(FakeDepartureRepository(), [route])
    observer = RecordingObserver()
    monitor.subscribe(observer)

    state = await monitor.run_cycle()

    assert observer.states == [state]
    assert state.routes == (route,)
    assert state.summary.text == "—"
    assert state.last_updated == BASE_TIME


@pytest.mark.asyncio
async def test_failed_route_is_reported_in_state() -> None:
    route = make_route()
    repository = FakeDepartureRepository()
    repository.failing_stops.add(STOP_ID)
    monitor, _, _, _ = build_monitor(repository, [route])

    state = await monitor.run_cycle()

    assert state.failed_route_ids == frozenset({route.id})
    assert state.departures[route.id] == ()


@pytest.mark.asyncio
async def test_gated_cycle_still_updates_display() -> None:
    route = make_route()
    repository = FakeDepartureRepository({STOP_ID: [make_departure(3, trip_id="a")]})
    monitor, _, sink, _ = build_monitor(repository, [route], window=NotificationWindow(enabled=False))

    state = await monitor.run_cycle()

    assert sink.sent == []
    assert state.notification_status.reason == "Notifications disabled in settings"
    assert len(state.departures[route.id]) == 1


@pytest.mark.asyncio
async def test_refresh_route_does_not_notify() -> None:
    route = make_route()
    repository = FakeDepartureRepository({STOP_ID: [make_departure(3, trip_id="a")]})
    monitor, registry, sink, _ = build_monitor(repository, [route])

    await monitor.refresh_route(route)

    assert sink.sent == []
    assert len(registry.departures_for(route.id)) == 1


async def wait_for_states(observer: RecordingObserver, count: int, timeout: float = 1.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while len(observer.states) < count:
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError(f"Expected {count} states, got {len(observer.states)}")
        await asyncio.sleep(0.005)


@pytest.mark.asyncio
async def test_adding_route_triggers_immediate_refresh() -> None:
    """Given a running monitor with a long interval, when a route is added, then a cycle runs right away."""
    route = make_route()
    repository = FakeDepartureRepository({STOP_ID: [make_departure(8, trip_id="a")]})
    monitor, registry, _, _ = build_monitor(repository, refresh_interval_seconds=3600)
    observer = RecordingObserver()
    monitor.subscribe(observer)

    await monitor.start()
    try:
        await wait_for_states(observer, 1)
        registry.add_route(route)
        await wait_for_states(observer, 2)
    finally:
        await monitor.stop()

    assert observer.states[-1].routes == (route,)
    assert len(observer.states[-1].departures[route.id]) == 1


@pytest.mark.asyncio
async def test_request_refresh_from_other_thread() -> None:
    monitor, _, _, _ = build_monitor(FakeDepartureRepository(), refresh_interval_seconds=3600)
    observer = RecordingObserver()
    monitor.subscribe(observer)

    await monitor.start()
    try:
        await wait_for_states(observer, 1)
        await asyncio.to_thread(monitor.request_refresh)
        await wait_for_states(observer, 2)
    finally:
        await monitor.stop()


@pytest.mark.asyncio
async def test_cycle_error_does_not_stop_loop() -> None:
    monitor, _, _, _ = build_monitor(FakeDepartureRepository(), refresh_interval_seconds=3600)
    observer = RecordingObserver()
    calls = 0
    original = monitor.poller.poll_all

    async def flaky(routes):
        nonlocal calls
        calls += 1
        if calls == 1:
            raise RuntimeError("boom")
        return await original(routes)

    monitor.poller.poll_all = flaky  # type: ignore[method-assign]
    monitor.subscribe(observer)

    await monitor.start()
    try:
        await asyncio.sleep(0.01)
        monitor.request_refresh()
        await wait_for_states(observer, 1)
    finally:
        await monitor.stop()

    assert calls >= 2


@pytest.mark.asyncio
async def test_cycle_follows_routes_changed_through_another_store(tmp_path: Path) -> None:
    """Given the CLI swapped routes in the shared settings file, when cycling, then only the new route is polled and notifies."""
    path = tmp_path / "settings.json"
    old_route = make_route(lead_time=5)
    new_route = make_route("5", "Sognsvann", lead_time=5)
    store = JsonSettingsStore(path)
    store.save_routes([old_route])
    store.save_notification_window(ALWAYS)
    registry = RouteRegistry(store)
    registry.load()
    clock = FakeClock()
    sink = RecordingSink()
    repository = FakeDepartureRepository(
        {
            STOP_ID: [
                make_departure(3, trip_id="old"),
                make_departure(4, line_code="5", destination="Sognsvann", trip_id="new"),
            ]
        }
    )
    monitor = DepartureMonitor(
        registry,
        DeparturePoller(repository, clock=clock),
        NotificationScheduler(sink, store, clock=clock),
        clock=clock,
    )

    cli_registry = RouteRegistry(JsonSettingsStore(path))
    cli_registry.load()
    cli_registry.remove_route(old_route.id)
    cli_registry.add_route(new_route)
    state = await monitor.run_cycle()

    assert state.routes == (new_route,)
    assert old_route.id not in state.departures
    assert [body for _, body, _ in sink.sent] == [
        "Line 5 to Sognsvann leaves in 4 minutes from Jernbanetorget"
    ]


@pytest.mark.asyncio
async def test_cycle_uses_lead_time_changed_through_another_store(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    route = make_route(lead_time=2)
    store = JsonSettingsStore(path)
    store.save_routes([route])
    store.save_notification_window(ALWAYS)
    registry = RouteRegistry(store)
    registry.load()
    clock = FakeClock()
    sink = RecordingSink()
    monitor = DepartureMonitor(
        registry,
        DeparturePoller(FakeDepartureRepository({STOP_ID: [make_departure(8, trip_id="a")]}), clock=clock),
        NotificationScheduler(sink, store, clock=clock),
        clock=clock,
    )

    await monitor.run_cycle()
    cli_registry = RouteRegistry(JsonSettingsStore(path))
    cli_registry.load()
    cli_registry.update_lead_time(route.id, 10)
    await monitor.run_cycle()

    assert len(sink.sent) == 1
    assert registry.get(route.id).notification_lead_time_minutes == 10
