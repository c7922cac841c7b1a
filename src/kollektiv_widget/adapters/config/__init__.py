"""Configuration adapters."""

from kollektiv_widget.adapters.config.app_config import AppConfig

__all__ = ["AppConfig"]
