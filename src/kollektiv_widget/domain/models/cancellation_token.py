"""Cancellation token for superseded searches."""


class SearchCancelledError(Exception):
    """Raised when a search was superseded before it completed."""


class CancellationToken:
    """Cooperative cancellation flag handed to a single search call."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def raise_if_cancelled(self) -> None:
        """Raise SearchCancelledError if the token was cancelled."""
        if self._cancelled:
            raise SearchCancelledError("Search was superseded")
