"""
=============================================================================
STATICD - Minimal Concurrent File-Serving Daemon
=============================================================================

Accepts TCP connections, reads one HTTP GET request from each, and answers
with a file from a fixed root directory or an error status. Then it closes
the connection. Always.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    staticd/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m staticd)
    ├── server.py            # FileServer: wiring and lifecycle
    ├── config.py            # ServerConfig dataclass
    ├── core/                # Concurrency and networking
    │   ├── socket_server.py # Non-blocking accept loop
    │   ├── connection.py    # One-request connection wrapper
    │   ├── thread_pool.py   # Fixed-size worker pool
    │   └── shutdown.py      # Cancellation token + signal coordinator
    ├── http/                # Protocol pieces
    │   ├── request.py       # Request line parsing
    │   ├── response.py      # Response serialization
    │   ├── status_codes.py  # The five status codes we send
    │   └── mime_types.py    # Extension → Content-Type
    └── handlers/
        ├── resolver.py      # Traversal-safe path resolution
        └── static.py        # Per-connection request handler

=============================================================================
QUICK START
=============================================================================

    from staticd import FileServer, ServerConfig

    server = FileServer(ServerConfig(address="0.0.0.0:8080", root_dir="./www"))
    server.run()     # Blocks until SIGTERM or Ctrl+C

=============================================================================
"""

__version__ = "0.1.1"

from .config import ServerConfig
from .server import FileServer

__all__ = ["FileServer", "ServerConfig", "__version__"]
