"""Exceptions for live updates app."""


class TransportClosedError(Exception):
    """Raised when an event cannot be written to a client's stream."""
