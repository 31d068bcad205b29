"""Exception types raised by the laser marker client.

Transport and protocol failures inside an exchange are reported through
:class:`~laser_marker_mcp.models.response.Response`; these exceptions cover
misuse of the connection and bad arguments to the command builders.
"""

from __future__ import annotations


class LaserMarkerError(Exception):
    """Base class for all laser marker client errors."""


class InvalidStateError(LaserMarkerError, RuntimeError):
    """The operation is not allowed in the current connection state."""


class NotConnectedError(LaserMarkerError, ConnectionError):
    """No connection with the laser marker has been established."""


class ConnectError(LaserMarkerError, ConnectionError):
    """The TCP connection to the laser marker could not be established."""

    def __init__(self, message: str, host: str = "", port: int = 0) -> None:
        super().__init__(message)
        self.host = host
        self.port = port


class ConnectTimeoutError(ConnectError, TimeoutError):
    """The laser marker did not accept the connection before the deadline."""


class ArgumentMismatchError(LaserMarkerError, ValueError):
    """Paired command arguments are empty or differ in length."""
