"""CLI for managing monitored routes and notification settings."""

import asyncio
import json
import sys
from dataclasses import asdict, dataclass, replace
from typing import Any

import aiohttp

from kollektiv_widget.adapters.config import AppConfig
from kollektiv_widget.adapters.entur_api import EnturDepartureRepository
from kollektiv_widget.adapters.entur_api.constants import STOP_PLACE_ID_PREFIX
from kollektiv_widget.adapters.storage import JsonSettingsStore
from kollektiv_widget.application import (
    NotificationScheduler,
    RouteRegistry,
    StopSearchService,
)
from kollektiv_widget.domain.models.notification_window import (
    format_minute_of_day,
    format_weekdays,
    parse_minute_of_day,
    parse_weekdays,
)
from kollektiv_widget.domain.models.route import (
    MAX_LEAD_TIME_MINUTES,
    MIN_LEAD_TIME_MINUTES,
    Route,
)
from kollektiv_widget.domain.models.transit_line import TransitLine
from kollektiv_widget.domain.ports import DepartureRepository, SettingsStore
from kollektiv_widget.main import (
    create_http_client,
    create_notification_sink,
    create_scheduler,
    create_stop_repository,
    load_config,
)


@dataclass(frozen=True)
class CliContext:
    """Services a command may use."""

    config: AppConfig
    store: SettingsStore
    registry: RouteRegistry
    stop_search: StopSearchService
    departure_repository: DepartureRepository
    scheduler: NotificationScheduler


def _parse_switch(value: str) -> bool:
    """Parse on/off style values."""
    normalized = value.strip().lower()
    if normalized in ("on", "true", "yes", "1"):
        return True
    if normalized in ("off", "false", "no", "0"):
        return False
    raise ValueError(f"Expected on or off, got {value!r}")


def _fail(message: str) -> None:
    print(message, file=sys.stderr)
    sys.exit(1)


def _line_to_dict(line: TransitLine) -> dict[str, Any]:
    return {
        "line_code": line.line_code,
        "line_name": line.line_name,
        "destination": line.destination,
        "transport_mode": line.transport_mode.value,
    }


def _route_to_dict(route: Route) -> dict[str, Any]:
    data = asdict(route)
    data["transport_mode"] = route.transport_mode.value
    data["effective_lead_time_minutes"] = route.effective_lead_time_minutes
    return data


def select_lines(
    lines: list[TransitLine], line_code: str, destination: str | None = None
) -> list[TransitLine]:
    """Pick the lines matching a code and, if given, a destination (case-insensitive)."""
    matches = [line for line in lines if line.line_code.lower() == line_code.lower()]
    if destination is not None:
        matches = [line for line in matches if line.destination.lower() == destination.lower()]
    return matches


async def _resolve_stop(ctx: CliContext, query: str) -> tuple[str, str]:
    """Resolve stop ID and name from a query (either an NSR id or search text)."""
    if query.startswith(STOP_PLACE_ID_PREFIX):
        departures = await ctx.departure_repository.get_departures(query, limit=1)
        return query, departures[0].stop_name if departures else query

    results = await ctx.stop_search.search(query)
    if not results:
        _fail(f"No stops found for '{query}'")
    stop = results[0]
    print(f"Found stop: {stop.label} ({stop.id})")
    return stop.id, stop.name


async def _handle_search_command(ctx: CliContext, query: str, output_json: bool) -> None:
    """Handle the search command."""
    results = await ctx.stop_search.search(query) or []

    if output_json:
        print(json.dumps([asdict(result) for result in results], indent=2, ensure_ascii=False))
        return

    if not results:
        _fail(f"No stops found for '{query}'")

    print(f"\nFound {len(results)} stop(s):\n")
    for stop in results:
        print(f"  {stop.label}")
        print(f"    ID: {stop.id}")
        print()


async def _handle_lines_command(ctx: CliContext, query: str, output_json: bool) -> None:
    """Handle the lines command."""
    stop_id, stop_name = await _resolve_stop(ctx, query)
    lines = await ctx.stop_search.available_lines(stop_id)

    if output_json:
        print(json.dumps([_line_to_dict(line) for line in lines], indent=2, ensure_ascii=False))
        return

    if not lines:
        _fail(f"No lines found for {stop_name} ({stop_id})")

    print(f"\nLines at {stop_name} ({stop_id}):\n")
    for line in lines:
        print(f"  {line.transport_mode.label:<6} {line.line_code:>5} → {line.destination}")


async def _handle_add_command(
    ctx: CliContext,
    query: str,
    line_code: str,
    destination: str | None,
    lead_time: int | None,
) -> None:
    """Handle the add command."""
    stop_id, stop_name = await _resolve_stop(ctx, query)
    lines = await ctx.stop_search.available_lines(stop_id)
    matches = select_lines(lines, line_code, destination)

    if not matches:
        _fail(f"Line {line_code} does not currently depart from {stop_name}")
    if len(matches) > 1:
        print(f"Line {line_code} has several destinations at {stop_name}:", file=sys.stderr)
        for line in matches:
            print(f"  {line.destination}", file=sys.stderr)
        _fail("Pass the destination as third argument.")

    route = Route.from_line(stop_id, stop_name, matches[0], lead_time)
    if not ctx.registry.add_route(route):
        print(f"Already monitoring {route.display_name} from {stop_name}")
        return
    route = ctx.registry.get(route.id) or route
    print(
        f"Added {route.display_name} from {stop_name} "
        f"(notify {route.effective_lead_time_minutes} min before, id: {route.id})"
    )


def _handle_remove_command(ctx: CliContext, route_id: str) -> None:
    """Handle the remove command."""
    if ctx.registry.remove_route(route_id):
        print(f"Removed {route_id}")
    else:
        print(f"No route with id {route_id}")


def _handle_list_command(ctx: CliContext, output_json: bool) -> None:
    """Handle the list command."""
    routes = ctx.registry.list()
    if output_json:
        print(json.dumps([_route_to_dict(route) for route in routes], indent=2, ensure_ascii=False))
        return

    if not routes:
        print("No routes monitored.")
        return

    print(f"\nMonitored routes ({len(routes)}):\n")
    for route in routes:
        print(f"  {route.transport_mode.label} {route.display_name} @ {route.stop_name}")
        print(f"    ID: {route.id}")
        print(f"    Notify: {route.effective_lead_time_minutes} min before departure")


def _handle_lead_time_command(ctx: CliContext, route_id: str, minutes: int) -> None:
    """Handle the lead-time command."""
    if not ctx.registry.update_lead_time(route_id, minutes):
        _fail(f"No route with id {route_id}")
    route = ctx.registry.get(route_id)
    if route is not None:
        print(f"{route.display_name}: notify {route.effective_lead_time_minutes} min before")


def _handle_window_command(ctx: CliContext, args: Any) -> None:
    """Handle the window command."""
    window = ctx.scheduler.current_window()
    changes: dict[str, Any] = {}
    if args.enable:
        changes["enabled"] = True
    if args.disable:
        changes["enabled"] = False
    if args.start is not None:
        changes["start_minute_of_day"] = parse_minute_of_day(args.start)
    if args.end is not None:
        changes["end_minute_of_day"] = parse_minute_of_day(args.end)
    if args.weekdays is not None:
        changes["active_weekdays"] = parse_weekdays(args.weekdays)

    if changes:
        window = replace(window, **changes)
        ctx.store.save_notification_window(window)
        print("Saved notification window.")

    print(f"  Notifications: {'on' if window.enabled else 'off'}")
    print(
        f"  Active hours:  {format_minute_of_day(window.start_minute_of_day)} - "
        f"{format_minute_of_day(window.end_minute_of_day)}"
    )
    print(f"  Weekdays:      {format_weekdays(window.active_weekdays) or 'none'}")


def _handle_preferences_command(ctx: CliContext, args: Any) -> None:
    """Handle the preferences command."""
    preferences = ctx.store.load_preferences()
    changes: dict[str, bool] = {}
    if args.dark_mode is not None:
        changes["dark_mode"] = _parse_switch(args.dark_mode)
    if args.launch_at_login is not None:
        changes["launch_at_login"] = _parse_switch(args.launch_at_login)

    if changes:
        preferences = replace(preferences, **changes)
        ctx.store.save_preferences(preferences)
        print("Saved preferences.")

    print(f"  Dark mode:       {'on' if preferences.dark_mode else 'off'}")
    print(f"  Launch at login: {'on' if preferences.launch_at_login else 'off'}")


def _handle_status_command(ctx: CliContext) -> None:
    """Handle the status command."""
    status = ctx.scheduler.gate_status()
    record = ctx.scheduler.record
    print(f"  Routes:     {len(ctx.registry.list())}")
    print(f"  Status:     {status.status_text}")
    print(f"  Notified:   {len(record)} departure(s) remembered")
    if record.last_cleared is not None:
        print(f"  Last clear: {record.last_cleared.astimezone(ctx.config.zone):%Y-%m-%d %H:%M}")


async def _handle_test_notification_command(ctx: CliContext) -> None:
    """Handle the test-notification command."""
    if await ctx.scheduler.send_test_notification():
        print("Test notification sent.")
    else:
        _fail("Test notification could not be delivered.")


def _setup_argparse() -> Any:
    """Set up and configure argument parser."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Departure widget configuration helper",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  # Search for stops
  kollektiv-config search "Jernbanetorget"

  # List lines departing from a stop (by ID or name)
  kollektiv-config lines NSR:StopPlace:58366

  # Monitor a line and notify 7 minutes before departure
  kollektiv-config add NSR:StopPlace:58366 31 Tonsenhagen --lead-time 7

  # Notify on weekdays between 07:00 and 09:30 only
  kollektiv-config window --start 07:00 --end 09:30 --weekdays mon,tue,wed,thu,fri

Lead times are limited to {MIN_LEAD_TIME_MINUTES}-{MAX_LEAD_TIME_MINUTES} minutes.
API: https://developer.entur.org (no auth, ET-Client-Name header required)
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    search_parser = subparsers.add_parser("search", help="Search for stops")
    search_parser.add_argument("query", help="Stop name to search for")
    search_parser.add_argument("--json", action="store_true", help="Output as JSON")

    lines_parser = subparsers.add_parser("lines", help="List lines departing from a stop")
    lines_parser.add_argument("query", help="Stop ID (NSR:StopPlace:...) or stop name")
    lines_parser.add_argument("--json", action="store_true", help="Output as JSON")

    add_parser = subparsers.add_parser("add", help="Monitor a line at a stop")
    add_parser.add_argument("query", help="Stop ID (NSR:StopPlace:...) or stop name")
    add_parser.add_argument("line_code", help="Public line code (e.g., 31)")
    add_parser.add_argument("destination", nargs="?", help="Destination (front text)")
    add_parser.add_argument("--lead-time", type=int, help="Minutes before departure to notify")

    remove_parser = subparsers.add_parser("remove", help="Stop monitoring a route")
    remove_parser.add_argument("route_id", help="Route ID as shown by 'list'")

    list_parser = subparsers.add_parser("list", help="List monitored routes")
    list_parser.add_argument("--json", action="store_true", help="Output as JSON")

    lead_time_parser = subparsers.add_parser("lead-time", help="Change a route's lead time")
    lead_time_parser.add_argument("route_id", help="Route ID as shown by 'list'")
    lead_time_parser.add_argument("minutes", type=int, help="Minutes before departure")

    window_parser = subparsers.add_parser("window", help="Show or change the active hours")
    switch = window_parser.add_mutually_exclusive_group()
    switch.add_argument("--enable", action="store_true", help="Turn notifications on")
    switch.add_argument("--disable", action="store_true", help="Turn notifications off")
    window_parser.add_argument("--start", help="Start of active hours (HH:MM)")
    window_parser.add_argument("--end", help="End of active hours (HH:MM)")
    window_parser.add_argument("--weekdays", help="Active weekdays (e.g., mon,tue,wed)")

    preferences_parser = subparsers.add_parser("preferences", help="Show or change preferences")
    preferences_parser.add_argument("--dark-mode", help="on or off")
    preferences_parser.add_argument("--launch-at-login", help="on or off")

    subparsers.add_parser("status", help="Show notification status")
    subparsers.add_parser("test-notification", help="Send a test notification")

    return parser


async def _execute_command(args: Any, ctx: CliContext) -> None:
    """Execute the appropriate command based on args."""
    if args.command == "search":
        await _handle_search_command(ctx, args.query, args.json)
    elif args.command == "lines":
        await _handle_lines_command(ctx, args.query, args.json)
    elif args.command == "add":
        await _handle_add_command(ctx, args.query, args.line_code, args.destination, args.lead_time)
    elif args.command == "remove":
        _handle_remove_command(ctx, args.route_id)
    elif args.command == "list":
        _handle_list_command(ctx, args.json)
    elif args.command == "lead-time":
        _handle_lead_time_command(ctx, args.route_id, args.minutes)
    elif args.command == "window":
        _handle_window_command(ctx, args)
    elif args.command == "preferences":
        _handle_preferences_command(ctx, args)
    elif args.command == "status":
        _handle_status_command(ctx)
    elif args.command == "test-notification":
        await _handle_test_notification_command(ctx)
    else:
        _setup_argparse().print_help()
        sys.exit(1)


async def main() -> None:
    """Main CLI entry point."""
    parser = _setup_argparse()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = load_config()
    store = JsonSettingsStore(config.settings_path)
    registry = RouteRegistry(store)
    registry.load()

    try:
        async with aiohttp.ClientSession() as session:
            http_client = create_http_client(config, session)
            ctx = CliContext(
                config=config,
                store=store,
                registry=registry,
                stop_search=StopSearchService(
                    create_stop_repository(config, http_client), debounce_seconds=0
                ),
                departure_repository=EnturDepartureRepository(http_client),
                scheduler=create_scheduler(config, store, create_notification_sink(config)),
            )
            await _execute_command(args, ctx)
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def cli_main() -> None:
    """Synchronous entry point for the CLI command."""
    asyncio.run(main())


if __name__ == "__main__":
    cli_main()
