"""Exceptions raised by ledboard."""


class LoadError(Exception):
    """Raised when a station or departures document cannot be loaded."""
