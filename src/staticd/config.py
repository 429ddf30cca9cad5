"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the file server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m staticd --threads 8                             │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── THREADS=8 python -m staticd                               │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The configuration is read once at startup and never changes afterwards.
Every worker reads root_dir and index_file without locking because nothing
ever writes them again.

=============================================================================
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional


logger = logging.getLogger(__name__)


DEFAULT_ADDRESS = "127.0.0.1:8080"
DEFAULT_ROOT_DIR = "./www"
DEFAULT_INDEX_FILE = "index.html"
DEFAULT_WORKERS = 2


def parse_address(address: str) -> tuple[str, int]:
    """
    Split a ``host:port`` listen address.

    IPv6 hosts use brackets, as in URLs:

        >>> parse_address("127.0.0.1:8080")
        ('127.0.0.1', 8080)
        >>> parse_address("[::1]:9000")
        ('::1', 9000)

    Raises:
        ValueError: If there is no port or the port is not a number.
    """
    host, sep, port = address.strip().rpartition(":")
    if not sep or not host or not port:
        raise ValueError(f"Invalid listen address: {address!r}. Expected host:port.")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]

    try:
        return host, int(port)
    except ValueError:
        raise ValueError(f"Invalid port in listen address: {address!r}") from None


def parse_worker_count(value: Optional[str], default: int = DEFAULT_WORKERS) -> int:
    """
    Interpret a worker count from the environment.

    Unparsable values fall back to the default; the result is floored to 1
    so the pool always has at least one worker.
    """
    try:
        count = int(value) if value is not None else default
    except ValueError:
        logger.warning(f"Ignoring invalid worker count {value!r}, using {default}")
        count = default
    return max(count, 1)


@dataclass
class ServerConfig:
    """
    Configuration for the file server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - address, backlog, poll_interval, timeout

    FILE SERVING
    - root_dir, index_file, buffer_size

    THREADING
    - workers

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    address: str = DEFAULT_ADDRESS
    """
    The host:port to listen on.
    Port 0 lets the OS pick a free port (used by the test suite).
    """

    backlog: int = 128
    """Maximum number of connections queued by the kernel before accept()."""

    poll_interval: float = 0.1
    """
    Seconds the accept loop sleeps when no connection is pending.
    Also the worst-case delay between a shutdown request and the loop
    noticing it.
    """

    timeout: Optional[float] = None
    """
    Socket timeout applied to each client connection.
    None = no timeout; a slow client occupies its worker until it sends.
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILE SERVING
    # ─────────────────────────────────────────────────────────────────────

    root_dir: str = DEFAULT_ROOT_DIR
    """Directory that every served file must live inside."""

    index_file: str = DEFAULT_INDEX_FILE
    """File served for "/" and empty request paths."""

    buffer_size: int = 4096
    """
    Bytes read from each connection, in a single recv().
    A request line that does not fit is treated as malformed.
    """

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    workers: int = DEFAULT_WORKERS
    """Fixed number of worker threads."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR)."""

    @property
    def host(self) -> str:
        return parse_address(self.address)[0]

    @property
    def port(self) -> int:
        return parse_address(self.address)[1]

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        ADDR        Listen address (default: 127.0.0.1:8080)
        DIR         Root directory (default: ./www)
        INDEX       Index file name (default: index.html)
        THREADS     Worker threads (default: 2, minimum 1)
        LOG_LEVEL   Logging level (default: INFO)

        =====================================================================
        """
        return cls(
            address=os.getenv("ADDR", DEFAULT_ADDRESS),
            root_dir=os.getenv("DIR", DEFAULT_ROOT_DIR),
            index_file=os.getenv("INDEX", DEFAULT_INDEX_FILE),
            workers=parse_worker_count(os.getenv("THREADS")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Fail fast: configuration errors surface at startup, before the
        socket is bound or any thread exists.
        """
        _, port = parse_address(self.address)

        if not 0 <= port < 65536:
            raise ValueError(f"Invalid port: {port}. Must be 0-65535.")

        if not self.index_file:
            raise ValueError("index_file must not be empty")

        if not self.root_dir:
            raise ValueError("root_dir must not be empty")

        if self.workers < 1:
            raise ValueError("workers must be >= 1")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be > 0")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")
