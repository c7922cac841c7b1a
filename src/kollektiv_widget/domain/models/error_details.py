"""Error details domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ErrorDetails:
    """Details extracted from a backend error."""

    status_code: int | None
    reason: str
