"""Protocol for observing monitor state."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from kollektiv_widget.domain.models.monitor_state import MonitorState


class MonitorStateObserverProtocol(Protocol):
    """Protocol for presentation layers subscribing to monitor updates."""

    def on_state_changed(self, state: "MonitorState") -> None:
        """Receive the state published after a poll cycle.

        Args:
            state: Snapshot of routes, displayed departures and status.
        """
        ...
