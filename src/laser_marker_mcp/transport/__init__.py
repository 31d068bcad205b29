"""Transport layer: TCP connection to the laser marker controller."""

from .tcp_connection import ConnectionSettings, TCPConnection
