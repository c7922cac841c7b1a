"""Protocol for the periodic departure monitor."""

from typing import Protocol


class DepartureMonitorProtocol(Protocol):
    """Protocol for polling departures on a fixed period."""

    async def start(self) -> None:
        """Start the monitor."""
        ...

    async def stop(self) -> None:
        """Stop the monitor."""
        ...

    def request_refresh(self) -> None:
        """Ask for an immediate poll cycle."""
        ...
