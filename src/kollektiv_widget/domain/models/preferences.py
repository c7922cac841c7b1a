"""User preferences domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Preferences:
    """Presentation preferences persisted alongside the routes."""

    dark_mode: bool = False
    launch_at_login: bool = False
