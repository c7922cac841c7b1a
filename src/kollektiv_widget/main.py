"""Main entry point for the departure widget."""

import asyncio
import contextlib
import logging
import signal
import sys
import tomllib
from datetime import timedelta
from pathlib import Path

import aiohttp
from pydantic import ValidationError

from kollektiv_widget.adapters.config import AppConfig
from kollektiv_widget.adapters.console import ConsolePresenter
from kollektiv_widget.adapters.entur_api import (
    EnturDepartureRepository,
    EnturHttpClient,
    EnturStopRepository,
)
from kollektiv_widget.adapters.notifications import (
    DesktopNotificationSink,
    LoggingNotificationSink,
)
from kollektiv_widget.adapters.storage import JsonSettingsStore
from kollektiv_widget.application import (
    DepartureMonitor,
    DeparturePoller,
    NotificationScheduler,
    RouteRegistry,
)
from kollektiv_widget.domain.ports import NotificationSink, SettingsStore

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stderr,
)

logger = logging.getLogger(__name__)

SETTINGS_WATCH_INTERVAL_SECONDS = 1.0


def load_config() -> AppConfig:
    """Load configuration from the environment and the optional TOML file.

    Exits the process with status 1 if the configuration is invalid.
    """
    try:
        config = AppConfig()
        config.load_toml()
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)
    except (FileNotFoundError, tomllib.TOMLDecodeError) as e:
        logger.error(f"Could not load configuration file: {e}")
        sys.exit(1)

    logging.getLogger().setLevel(config.log_level)
    return config


def create_http_client(config: AppConfig, session: aiohttp.ClientSession) -> EnturHttpClient:
    return EnturHttpClient(
        session=session,
        client_name=config.entur_client_name,
        timeout_seconds=config.entur_api_timeout,
        min_delay_seconds=config.entur_min_delay_seconds,
        journey_planner_url=config.entur_journey_planner_url,
        geocoder_url=config.entur_geocoder_url,
    )


def create_stop_repository(
    config: AppConfig, http_client: EnturHttpClient
) -> EnturStopRepository:
    return EnturStopRepository(
        http_client,
        search_size=config.search_result_size,
        search_language=config.search_language,
        lines_lookahead=config.lines_lookahead_departures,
    )


def create_notification_sink(config: AppConfig) -> NotificationSink:
    if config.notification_sink == "log":
        return LoggingNotificationSink()
    return DesktopNotificationSink()


def create_scheduler(
    config: AppConfig, store: SettingsStore, sink: NotificationSink
) -> NotificationScheduler:
    return NotificationScheduler(
        sink=sink,
        store=store,
        default_window=config.default_notification_window(),
        clear_interval=timedelta(hours=config.dedup_clear_interval_hours),
        timezone=config.zone,
        sound=config.notification_sound,
    )


def _file_signature(path: Path) -> tuple[int, int, int] | None:
    try:
        stat = path.stat()
    except FileNotFoundError:
        return None
    return (stat.st_mtime_ns, stat.st_ino, stat.st_size)


async def watch_settings_file(
    path: Path,
    registry: RouteRegistry,
    monitor: DepartureMonitor,
    interval_seconds: float = SETTINGS_WATCH_INTERVAL_SECONDS,
) -> None:
    """Refresh the monitor as soon as another process changes the stored routes.

    Args:
        path: Settings file shared with the configuration CLI.
        registry: Registry to re-sync when the file changes.
        monitor: Monitor to wake for an immediate cycle.
        interval_seconds: How often the file is checked.
    """
    last_signature = _file_signature(path)
    while True:
        await asyncio.sleep(interval_seconds)
        signature = _file_signature(path)
        if signature == last_signature:
            continue
        last_signature = signature
        try:
            changed = registry.sync()
        except Exception as e:
            logger.error(f"Failed to re-read routes from {path}: {e}", exc_info=True)
            continue
        if changed:
            monitor.request_refresh()


async def _wait_for_shutdown() -> None:
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # Signal handlers are not available on every platform
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop_event.set)
    await stop_event.wait()


async def main() -> None:
    """Main application entry point."""
    config = load_config()

    store = JsonSettingsStore(config.settings_path)
    registry = RouteRegistry(store)
    registry.load()

    if not registry.list():
        logger.warning("No routes configured yet.")
        logger.warning('Search for a stop with: kollektiv-config search "Jernbanetorget"')
        logger.warning("Then add a route with: kollektiv-config add <stop id> <line> <destination>")

    # Create aiohttp session for efficient HTTP connections
    async with aiohttp.ClientSession() as session:
        http_client = create_http_client(config, session)
        poller = DeparturePoller(
            EnturDepartureRepository(http_client),
            fetch_limit=config.number_of_departures,
            max_parallel_polls=config.max_parallel_polls,
        )
        scheduler = create_scheduler(config, store, create_notification_sink(config))
        monitor = DepartureMonitor(
            registry,
            poller,
            scheduler,
            refresh_interval_seconds=config.refresh_interval_seconds,
            departures_per_route=config.departures_per_route,
        )
        monitor.subscribe(ConsolePresenter(config.zone))

        await monitor.start()
        watcher = asyncio.create_task(watch_settings_file(store.path, registry, monitor))
        try:
            await _wait_for_shutdown()
            logger.info("Shutting down...")
        finally:
            watcher.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await watcher
            await monitor.stop()


def cli_main() -> None:
    """Synchronous entry point for the widget command."""
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(main())


if __name__ == "__main__":
    cli_main()
