"""TCP connection to a Keyence MD-X laser marker controller.

The controller listens on a dedicated port (50002 by default) and speaks a
strict request/response text protocol with no correlation identifiers, so
one connection carries at most one exchange at a time. Every public
method that touches the socket takes the instance lock.
"""

from __future__ import annotations

import codecs
import logging
import selectors
import socket
import struct
import sys
import threading
from dataclasses import dataclass

from ..errors import ConnectError, ConnectTimeoutError, InvalidStateError, NotConnectedError
from ..protocol.framing import REPLY_ENCODING

logger = logging.getLogger(__name__)

DEFAULT_PORT = 50002
SEND_TIMEOUT_MS = 3000
RECEIVE_TIMEOUT_MS = 10000
SEND_BUFFER_SIZE = 8192
RECEIVE_BUFFER_SIZE = 8192
CONNECT_TIMEOUT_MS = 60000

LINGER_SECONDS = 1
IP_TTL = 32
_LINGER_FORMAT = "HH" if sys.platform == "win32" else "ii"


@dataclass
class ConnectionSettings:
    """Socket parameters applied on connect. Timeouts are in milliseconds;
    zero or a negative value means wait forever."""

    port: int = DEFAULT_PORT
    send_timeout_ms: int = SEND_TIMEOUT_MS
    receive_timeout_ms: int = RECEIVE_TIMEOUT_MS
    send_buffer_size: int = SEND_BUFFER_SIZE
    receive_buffer_size: int = RECEIVE_BUFFER_SIZE
    connect_timeout_ms: int = CONNECT_TIMEOUT_MS


def _seconds(timeout_ms: int) -> float | None:
    return timeout_ms / 1000 if timeout_ms > 0 else None


def _readable(sock: socket.socket) -> bool:
    with selectors.DefaultSelector() as selector:
        selector.register(sock, selectors.EVENT_READ)
        return bool(selector.select(0))


def _peer_closed(sock: socket.socket) -> bool:
    """Return True if the peer has shut the connection down or reset it."""
    try:
        if not _readable(sock):
            return False
        return sock.recv(1, socket.MSG_PEEK) == b""
    except OSError:
        return True


class TCPConnection:
    """Manages the TCP stream socket to the laser marker.

    Usage::

        conn = TCPConnection()
        conn.connect("192.168.0.10")
        reply = conn.exchange(b"RX,Ready\\r")
        conn.disconnect()

    The socket is also released when the instance is garbage collected,
    but callers should disconnect explicitly or use the instance as a
    context manager.
    """

    def __init__(self) -> None:
        self._sock: socket.socket | None = None
        self._host = ""
        self._settings = ConnectionSettings()
        self._lock = threading.Lock()

    @property
    def host(self) -> str:
        return self._host

    @property
    def settings(self) -> ConnectionSettings:
        return self._settings

    @property
    def connected(self) -> bool:
        sock = self._sock
        if sock is None or sock.fileno() == -1:
            return False
        return not _peer_closed(sock)

    def __enter__(self) -> TCPConnection:
        return self

    def __exit__(self, *exc_info) -> None:
        self.disconnect()

    def __del__(self) -> None:
        if getattr(self, "_sock", None) is not None:
            self._release()

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
        """Open a connection to the controller, waiting at most
        ``connect_timeout_ms`` for it to be accepted.

        Raises:
            ValueError: If ``port`` is outside 1-65535.
            InvalidStateError: If the connection is already open.
            ConnectTimeoutError: If the controller did not accept in time.
            ConnectError: If the connection failed for any other reason.
        """
        if not 0 < port < 65536:
            raise ValueError(f"Port must be 1-65535, got {port}")
        settings = ConnectionSettings(
            port=port,
            send_timeout_ms=send_timeout_ms,
            receive_timeout_ms=receive_timeout_ms,
            send_buffer_size=send_buffer_size,
            receive_buffer_size=receive_buffer_size,
            connect_timeout_ms=connect_timeout_ms,
        )
        with self._lock:
            if self.connected:
                raise InvalidStateError(
                    f"Already connected to {self._host}:{self._settings.port}; "
                    f"disconnect first"
                )
            # Drop a socket the peer has already severed
            self._release()

            sock = self._create_socket()
            try:
                self._configure(sock, settings)
                sock.settimeout(_seconds(connect_timeout_ms))
                sock.connect((host, port))
            except TimeoutError as e:
                self._close_quietly(sock)
                raise ConnectTimeoutError(
                    f"No response within {connect_timeout_ms}ms from {host}:{port}",
                    host,
                    port,
                ) from e
            except OSError as e:
                self._close_quietly(sock)
                raise ConnectError(
                    f"Could not connect to laser marker at {host}:{port}: {e}",
                    host,
                    port,
                ) from e
            except BaseException:
                self._close_quietly(sock)
                raise

            self._sock = sock
            self._host = host
            self._settings = settings
            logger.info("Connected to laser marker at %s:%d", host, port)

    def disconnect(self) -> None:
        """Close the connection. Safe to call when already disconnected."""
        with self._lock:
            self._release()

    def send_all(self, data: bytes) -> int:
        """Write every byte of ``data``, resuming after partial sends.

        Returns:
            Number of bytes written.

        Raises:
            NotConnectedError: If there is no socket.
            OSError: If the transport fails or the send timeout expires.
        """
        sock = self._require_socket()
        sock.settimeout(_seconds(self._settings.send_timeout_ms))
        view = memoryview(data)
        total = 0
        while total < len(data):
            sent = sock.send(view[total:])
            if sent == 0:
                raise ConnectionError("Socket connection broken during send")
            total += sent
        logger.debug("Sent %d bytes: %r", total, data)
        return total

    def receive(self, timeout_ms: int | None = None) -> str:
        """Read a reply and return it as text.

        Blocks for the first read, then keeps reading for as long as more
        bytes are already waiting. A reply that arrives with a pause in the
        middle is returned truncated at the pause.

        Args:
            timeout_ms: Deadline for the first read of this call only;
                defaults to the receive timeout given on connect.

        Raises:
            NotConnectedError: If there is no socket.
            ConnectionResetError: If the peer closed the connection before
                sending anything.
            OSError: If the transport fails or the receive timeout expires.
        """
        sock = self._require_socket()
        if timeout_ms is None:
            timeout_ms = self._settings.receive_timeout_ms
        sock.settimeout(_seconds(timeout_ms))

        decoder = codecs.getincrementaldecoder(REPLY_ENCODING)(errors="replace")
        chunks: list[str] = []
        while True:
            data = sock.recv(self._settings.receive_buffer_size)
            if not data:
                if not chunks:
                    raise ConnectionResetError(
                        "Connection closed by the laser marker before replying"
                    )
                break
            chunks.append(decoder.decode(data))
            if not _readable(sock):
                break
        chunks.append(decoder.decode(b"", final=True))

        reply = "".join(chunks)
        logger.debug("Received %r", reply)
        return reply

    def exchange(self, data: bytes, receive_timeout_ms: int | None = None) -> str:
        """Send one request and read its reply as a single locked step."""
        with self._lock:
            self.send_all(data)
            return self.receive(receive_timeout_ms)

    def _create_socket(self) -> socket.socket:
        return socket.socket(socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP)

    def _configure(self, sock: socket.socket, settings: ConnectionSettings) -> None:
        """Apply socket options before connecting."""
        exclusive = getattr(socket, "SO_EXCLUSIVEADDRUSE", None)
        if exclusive is not None:
            sock.setsockopt(socket.SOL_SOCKET, exclusive, 1)
        else:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 0)
        sock.setsockopt(
            socket.SOL_SOCKET,
            socket.SO_LINGER,
            struct.pack(_LINGER_FORMAT, 1, LINGER_SECONDS),
        )
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        sock.setsockopt(socket.IPPROTO_IP, socket.IP_TTL, IP_TTL)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_SNDBUF, settings.send_buffer_size)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_RCVBUF, settings.receive_buffer_size)

    def _require_socket(self) -> socket.socket:
        if self._sock is None:
            raise NotConnectedError("No connection established")
        return self._sock

    def _release(self) -> None:
        sock, self._sock = self._sock, None
        if sock is None:
            return
        self._close_quietly(sock)
        logger.info("Disconnected from %s:%d", self._host, self._settings.port)

    @staticmethod
    def _close_quietly(sock: socket.socket) -> None:
        try:
            sock.close()
        except OSError as e:
            logger.warning("Error closing socket: %s", e)
