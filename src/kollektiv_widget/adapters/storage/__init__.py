"""Settings persistence adapters."""

from .in_memory_settings_store import InMemorySettingsStore
from .json_settings_store import JsonSettingsStore

__all__ = ["InMemorySettingsStore", "JsonSettingsStore"]
