"""Tests for the route registry."""

import threading

from kollektiv_widget.adapters.storage import InMemorySettingsStore
from kollektiv_widget.application.route_registry import (
    ROUTE_ADDED,
    ROUTE_REMOVED,
    ROUTE_UPDATED,
    RouteRegistry,
)
from tests.fakes import make_departure, make_route


def make_registry(store: InMemorySettingsStore | None = None) -> tuple[RouteRegistry, InMemorySettingsStore]:
    store = store or InMemorySettingsStore()
    registry = RouteRegistry(store)
    registry.load()
    return registry, store


def test_add_route_persists_and_notifies() -> None:
    registry, store = make_registry()
    events: list[tuple[str, str]] = []
    registry.subscribe(lambda event, route: events.append((event, route.id)))
    route = make_route()

    assert registry.add_route(route)

    assert registry.list() == (route,)
    assert store.routes == [route]
    assert events == [(ROUTE_ADDED, route.id)]


def test_add_duplicate_route_is_a_no_op() -> None:
    """Given a monitored route, when adding the same triple again, then nothing changes."""
    registry, store = make_registry()
    route = make_route()
    registry.add_route(route)
    saves = store.save_count

    assert not registry.add_route(make_route(lead_time=12))

    assert len(registry.list()) == 1
    assert registry.list()[0].notification_lead_time_minutes is None
    assert store.save_count == saves


def test_add_route_clamps_lead_time() -> None:
    registry, _ = make_registry()

    registry.add_route(make_route(lead_time=90))

    assert registry.list()[0].notification_lead_time_minutes == 30


def test_routes_keep_insertion_order() -> None:
    registry, _ = make_registry()
    first = make_route(line_code="31")
    second = make_route(line_code="20", destination="Skøyen")

    registry.add_route(first)
    registry.add_route(second)

    assert [route.id for route in registry.list()] == [first.id, second.id]


def test_remove_route_drops_cached_departures() -> None:
    registry, store = make_registry()
    route = make_route()
    registry.add_route(route)
    registry.set_departures(route.id, [make_departure(3)])

    assert registry.remove_route(route.id)

    assert registry.list() == ()
    assert registry.departures_for(route.id) == ()
    assert store.routes == []


def test_remove_unknown_route_is_ignored() -> None:
    """Given no such route, when removing it, then nothing is saved and no event fires."""
    registry, store = make_registry()
    events: list[str] = []
    registry.subscribe(lambda event, route: events.append(event))

    assert not registry.remove_route("missing")

    assert store.save_count == 0
    assert events == []


def test_update_lead_time_clamps_and_notifies() -> None:
    registry, store = make_registry()
    route = make_route()
    registry.add_route(route)
    events: list[str] = []
    registry.subscribe(lambda event, route: events.append(event))

    assert registry.update_lead_time(route.id, 0)

    assert registry.get(route.id).notification_lead_time_minutes == 1
    assert store.routes[0].notification_lead_time_minutes == 1
    assert events == [ROUTE_UPDATED]


def test_update_lead_time_of_unknown_route() -> None:
    registry, _ = make_registry()

    assert not registry.update_lead_time("missing", 10)


def test_set_departures_for_removed_route_is_ignored() -> None:
    """Given a route removed while its poll was in flight, when results arrive, then they are dropped."""
    registry, _ = make_registry()
    route = make_route()
    registry.add_route(route)
    registry.remove_route(route.id)

    registry.set_departures(route.id, [make_departure(3)])

    assert registry.all_departures() == {}


def test_load_migrates_legacy_routes() -> None:
    """Given routes loaded from the legacy shape, when loading, then they are re-saved immediately."""
    route = make_route()
    store = InMemorySettingsStore(routes=[route], from_legacy=True)

    registry, _ = make_registry(store)

    assert registry.list() == (route,)
    assert store.save_count == 1
    assert not store.from_legacy


def test_load_current_shape_does_not_resave() -> None:
    store = InMemorySettingsStore(routes=[make_route()])

    make_registry(store)

    assert store.save_count == 0


def test_load_drops_duplicate_ids() -> None:
    store = InMemorySettingsStore(routes=[make_route(), make_route(lead_time=9)])

    registry, _ = make_registry(store)

    assert len(registry.list()) == 1


def test_failing_listener_does_not_break_mutation() -> None:
    registry, _ = make_registry()
    events: list[str] = []

    def broken(event, route):
        raise RuntimeError("boom")

    registry.subscribe(broken)
    registry.subscribe(lambda event, route: events.append(event))

    assert registry.add_route(make_route())
    assert registry.remove_route(make_route().id)
    assert events == [ROUTE_ADDED, ROUTE_REMOVED]


def test_concurrent_adds_keep_every_route() -> None:
    registry, _ = make_registry()
    routes = [make_route(line_code=str(code)) for code in range(50)]

    threads = [threading.Thread(target=registry.add_route, args=(route,)) for route in routes]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert {route.id for route in registry.list()} == {route.id for route in routes}


def test_sync_picks_up_routes_changed_by_another_writer() -> None:
    """Given routes rewritten in the store, when syncing, then the registry follows and emits one event per change."""
    kept = make_route("31", "Tonsenhagen")
    removed = make_route("5", "Sognsvann")
    added = make_route("20", "Skøyen")
    registry, store = make_registry(InMemorySettingsStore([kept, removed]))
    registry.set_departures(removed.id, [make_departure(3, line_code="5", destination="Sognsvann")])
    events: list[tuple[str, str]] = []
    registry.subscribe(lambda event, route: events.append((event, route.id)))
    store.routes = [kept.with_lead_time(9), added]

    assert registry.sync()

    assert registry.list() == (kept.with_lead_time(9), added)
    assert registry.departures_for(removed.id) == ()
    assert events == [
        (ROUTE_REMOVED, removed.id),
        (ROUTE_UPDATED, kept.id),
        (ROUTE_ADDED, added.id),
    ]


def test_sync_without_changes_is_quiet() -> None:
    route = make_route()
    registry, store = make_registry(InMemorySettingsStore([route]))
    registry.set_departures(route.id, [make_departure(3)])
    events: list[str] = []
    registry.subscribe(lambda event, _route: events.append(event))

    assert not registry.sync()

    assert events == []
    assert store.save_count == 0
    assert len(registry.departures_for(route.id)) == 1
