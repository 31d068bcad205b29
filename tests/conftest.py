"""Shared fixtures: a localhost stand-in for the laser marker controller."""

from __future__ import annotations

import socket
import threading

import pytest


class StubServer:
    """Accepts one connection and answers each ``\\r``-terminated request
    with the next canned reply. An empty reply sends nothing; ``None``
    closes the connection instead of answering."""

    def __init__(self, replies) -> None:
        self.replies = list(replies)
        self.received: list[bytes] = []
        self._listener = socket.create_server(("127.0.0.1", 0))
        self.port = self._listener.getsockname()[1]
        self._thread = threading.Thread(target=self._serve, daemon=True)

    def start(self) -> StubServer:
        self._thread.start()
        return self

    def close(self) -> None:
        self._listener.close()
        self._thread.join(timeout=2)

    def _serve(self) -> None:
        try:
            conn, _ = self._listener.accept()
        except OSError:
            return
        with conn:
            for reply in self.replies:
                request = b""
                while not request.endswith(b"\r"):
                    chunk = conn.recv(1024)
                    if not chunk:
                        return
                    request += chunk
                self.received.append(request)
                if reply is None:
                    return
                if reply:
                    conn.sendall(reply)
            # Hold the connection open until the client goes away
            try:
                while conn.recv(1024):
                    pass
            except OSError:
                pass


@pytest.fixture
def stub_server():
    """Factory fixture: ``stub_server(b"RX,OK\\r", ...)`` starts a server."""
    servers: list[StubServer] = []

    def start(*replies) -> StubServer:
        server = StubServer(replies).start()
        servers.append(server)
        return server

    yield start
    for server in servers:
        server.close()
