"""
Unit tests for the client connection wrapper.
"""

import socket
import threading
import time

from staticd.core.connection import DRAIN_TIMEOUT, Connection, ConnectionState


class TestClose:
    def test_close_is_idempotent(self):
        server_side, client_side = socket.socketpair()
        with client_side:
            conn = Connection(socket=server_side, address=("local", 0))
            conn.close()
            conn.close()

            assert conn.state == ConnectionState.CLOSED
            assert client_side.recv(16) == b""

    def test_drain_is_bounded_for_chatty_client(self):
        server_side, client_side = socket.socketpair()
        stop = threading.Event()

        def chatter():
            # Keeps sending well past the drain deadline
            while not stop.is_set():
                try:
                    client_side.send(b"x" * 64)
                except OSError:
                    return
                time.sleep(0.01)

        sender = threading.Thread(target=chatter, daemon=True)
        sender.start()
        try:
            conn = Connection(socket=server_side, address=("local", 0), timeout=30.0)

            start = time.monotonic()
            conn.close()
            elapsed = time.monotonic() - start

            assert conn.state == ConnectionState.CLOSED
            assert elapsed < DRAIN_TIMEOUT + 0.5
        finally:
            stop.set()
            sender.join(timeout=2.0)
            client_side.close()
