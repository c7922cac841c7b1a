"""Stop search result domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class StopSearchResult:
    """A stop place returned by free-text search."""

    id: str
    name: str
    label: str
