"""Entur API adapters."""

from kollektiv_widget.adapters.entur_api.entur_departure_repository import (
    EnturDepartureRepository,
)
from kollektiv_widget.adapters.entur_api.entur_stop_repository import EnturStopRepository
from kollektiv_widget.adapters.entur_api.http_client import EnturApiError, EnturHttpClient

__all__ = [
    "EnturApiError",
    "EnturDepartureRepository",
    "EnturHttpClient",
    "EnturStopRepository",
]
