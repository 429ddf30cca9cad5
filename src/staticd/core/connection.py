"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps the socket returned by accept() for the lifetime of one request.

The connection model is the simplest HTTP allows:

    accept ──► read once ──► write response ──► close
                                                  ▲
                   every error path also ends here┘

There is no keep-alive, so a Connection is used for exactly one request and
is always closed afterwards. Using it as a context manager guarantees that.

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional


DRAIN_TIMEOUT = 0.5


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, for logging and debugging."""
    NEW = "new"            # Just accepted, nothing read yet
    READING = "reading"    # Waiting for request bytes
    WRITING = "writing"    # Sending the response
    CLOSED = "closed"      # Socket released


@dataclass
class Connection:
    """
    Represents one accepted client connection.

    Attributes:
        socket: The client socket.
        address: Client's address tuple as returned by accept().
        id: Short connection identifier (for logging).
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        timeout: Socket timeout in seconds, or None to block indefinitely.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    timeout: Optional[float] = None

    def __post_init__(self):
        # Accepted sockets must block even though the listener does not
        self.socket.setblocking(True)

        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def peer(self) -> str:
        """Printable client address, e.g. ``127.0.0.1:54321``."""
        try:
            return f"{self.address[0]}:{self.address[1]}"
        except (IndexError, TypeError):
            return "unknown"

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    def read_once(self, buffer_size: int) -> bytes:
        """
        Perform a single recv() of up to ``buffer_size`` bytes.

        Returns b"" if the peer closed without sending anything.

        Raises:
            OSError: On any transport error (including socket timeouts).
        """
        self.state = ConnectionState.READING
        return self.socket.recv(buffer_size)

    def send(self, data: bytes) -> bool:
        """
        Send data to the client.

        Uses sendall() so partial writes are retried by the socket layer.

        Returns:
            True if the data was sent, False if the connection failed.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Failed to send response: {e}")
            return False

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR) sends FIN so the client sees end-of-response.
        2. Drain whatever the client still has in flight, for at most
           DRAIN_TIMEOUT seconds in total, so the kernel does not answer
           unread data with a RST that could discard our reply.
        3. close() releases the file descriptor.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        deadline = time.monotonic() + DRAIN_TIMEOUT
        try:
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                if not self.socket.recv(1024):
                    break
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
