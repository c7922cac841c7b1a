"""Transit departure monitor with ahead-of-departure notifications."""

__version__ = "0.3.0"
