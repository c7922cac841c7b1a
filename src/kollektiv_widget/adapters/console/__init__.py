"""Console presentation adapter."""

from .console_presenter import ConsolePresenter

__all__ = ["ConsolePresenter"]
