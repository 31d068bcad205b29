"""Command exchange with a laser marker over its TCP text protocol.

:class:`LaserMarker` validates a command's framing, sends it, reads the
reply and classifies it. Every outcome, including transport failures, is
returned as a :class:`~laser_marker_mcp.models.response.Response`; only
misuse of the connection itself (connecting twice, connect failures)
raises.
"""

from __future__ import annotations

import logging

from .errors import NotConnectedError
from .models.response import Response
from .protocol.framing import command_prefix, encode_command, validate_command
from .protocol.parser import is_success
from .transport.tcp_connection import (
    CONNECT_TIMEOUT_MS,
    DEFAULT_PORT,
    RECEIVE_BUFFER_SIZE,
    RECEIVE_TIMEOUT_MS,
    SEND_BUFFER_SIZE,
    SEND_TIMEOUT_MS,
    TCPConnection,
)

logger = logging.getLogger(__name__)


class LaserMarker:
    """Base client for the ``WX``/``RX`` command protocol.

    Usage::

        with LaserMarker() as marker:
            marker.connect("192.168.0.10")
            response = marker.run("RX,Ready\\r")

    One instance drives one connection and is meant for a single caller;
    concurrent ``run`` calls are serialized, never interleaved.
    """

    def __init__(self, connection: TCPConnection | None = None) -> None:
        self._connection = connection if connection is not None else TCPConnection()

    @property
    def connection(self) -> TCPConnection:
        return self._connection

    @property
    def connected(self) -> bool:
        return self._connection.connected

    def __enter__(self) -> LaserMarker:
        return self

    def __exit__(self, *exc_info) -> None:
        self.disconnect()

    def connect(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        send_timeout_ms: int = SEND_TIMEOUT_MS,
        receive_timeout_ms: int = RECEIVE_TIMEOUT_MS,
        send_buffer_size: int = SEND_BUFFER_SIZE,
        receive_buffer_size: int = RECEIVE_BUFFER_SIZE,
        connect_timeout_ms: int = CONNECT_TIMEOUT_MS,
    ) -> None:
        """Connect to the controller. See :meth:`TCPConnection.connect`."""
        self._connection.connect(
            host,
            port,
            send_timeout_ms=send_timeout_ms,
            receive_timeout_ms=receive_timeout_ms,
            send_buffer_size=send_buffer_size,
            receive_buffer_size=receive_buffer_size,
            connect_timeout_ms=connect_timeout_ms,
        )

    def disconnect(self) -> None:
        self._connection.disconnect()

    def run(self, command: str, receive_timeout_ms: int | None = None) -> Response:
        """Send a command and return the classified reply.

        Args:
            command: Complete command, e.g. ``"WX,StartMarking\\r"``.
            receive_timeout_ms: Reply deadline for this call only. The
                connection's configured receive timeout is left untouched.

        Returns:
            A successful Response when the reply starts with the command's
            prefix followed by ``,OK``. A device error yields
            ``success=False`` with the reply text in ``message``. A missing
            connection or a transport failure yields ``success=False``, an
            empty message, and the cause in ``error``.
        """
        if not self.connected:
            return Response(False, "", NotConnectedError("No connection established"))

        problem = validate_command(command)
        if problem is not None:
            return Response(False, problem)

        try:
            message = self._connection.exchange(
                encode_command(command), receive_timeout_ms
            )
        except OSError as e:
            logger.warning("Exchange of %r failed, dropping connection: %s", command, e)
            self._connection.disconnect()
            return Response(False, "", e)

        return Response(is_success(message, command_prefix(command)), message)
