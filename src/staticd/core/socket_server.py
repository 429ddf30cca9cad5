"""
=============================================================================
LISTENING SOCKET AND ACCEPT LOOP
=============================================================================

This module owns the listening socket. It binds eagerly at startup and then
runs a non-blocking accept loop that hands each new connection to a
callback (the server submits it to the thread pool).

=============================================================================
WHY NON-BLOCKING ACCEPT?
=============================================================================

A blocking accept() would sit in the kernel until a client connects, and a
shutdown request could wait forever behind it. Instead the listening socket
is put in non-blocking mode and we poll:

    while not token.cancelled:
        try:
            conn = accept()            ◄── returns immediately
            on_connection(conn)
        except BlockingIOError:
            sleep(poll_interval)       ◄── nothing pending, 100 ms nap
        except OSError:
            log and keep going         ◄── e.g. EMFILE, ECONNABORTED

    ┌─────────────────────────────────────────────────────────────────────┐
    │   CPU usage: bounded by the sleep (no busy loop)                    │
    │   Shutdown latency: at most one poll interval                       │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
SOCKET OPTIONS
=============================================================================

SO_REUSEADDR:  Restart immediately instead of waiting out TIME_WAIT.
TCP_NODELAY:   Disable Nagle's algorithm so small responses go out at once.

=============================================================================
"""

import socket
import time
import logging
from typing import Callable, Optional

from ..config import ServerConfig
from .connection import Connection
from .shutdown import CancellationToken


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Owns the listening socket and runs the accept loop.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      SocketServer Lifecycle                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    bind()        socket() → setsockopt() → bind() → listen()        │
    │                  → setblocking(False)                               │
    │                  Raises OSError on failure (fatal at startup)       │
    │                                                                      │
    │    serve()       Accept loop until the token is cancelled           │
    │                                                                      │
    │    close()       Release the listening socket                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Usage:
        server = SocketServer(config)
        server.bind()
        server.serve(token, pool_submit)   # Blocks until token cancelled
    """

    def __init__(self, config: ServerConfig):
        self.config = config
        self._socket: Optional[socket.socket] = None

    @property
    def is_bound(self) -> bool:
        return self._socket is not None

    @property
    def address(self) -> tuple:
        """The bound address; reflects the real port when configured with 0."""
        if self._socket is None:
            return (self.config.host, self.config.port)
        return self._socket.getsockname()

    def _create_socket(self, host: str) -> socket.socket:
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)

        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        return sock

    def bind(self):
        """
        Create, bind and listen on the configured address.

        Idempotent: a second call is a no-op.

        Raises:
            OSError: If the address is in use or not permitted.
        """
        if self._socket is not None:
            return

        host, port = self.config.host, self.config.port
        sock = self._create_socket(host)

        try:
            sock.bind((host, port))
            sock.listen(self.config.backlog)
            sock.setblocking(False)
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.address}: {e}")
            sock.close()
            raise

        self._socket = sock

    def serve(self, token: CancellationToken, on_connection: Callable[[Connection], None]):
        """
        Run the accept loop until ``token`` is cancelled.

        Args:
            token: Checked once per iteration.
            on_connection: Receives each accepted Connection. Must not block;
                           the server passes the pool's submit function.
        """
        if self._socket is None:
            self.bind()

        try:
            self._accept_loop(token, on_connection)
        finally:
            self.close()

    def _accept_loop(self, token: CancellationToken, on_connection: Callable[[Connection], None]):
        while not token.cancelled:
            try:
                client_socket, client_address = self._socket.accept()

            except BlockingIOError:
                # Nothing pending. Sleep instead of spinning
                time.sleep(self.config.poll_interval)
                continue

            except OSError as e:
                logger.error(f"Connection failed: {e}")
                continue

            conn = Connection(
                socket=client_socket,
                address=client_address,
                timeout=self.config.timeout,
            )
            logger.debug(f"[{conn.id}] Accepted connection from {conn.peer}")

            on_connection(conn)

    def close(self):
        """Close the listening socket."""
        if self._socket is None:
            return

        try:
            self._socket.close()
        except OSError:
            pass
        self._socket = None

        logger.info("Listening socket closed")
