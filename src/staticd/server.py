"""
=============================================================================
FILE SERVER - Main Orchestrator
=============================================================================

Wires the core components together and owns the process lifecycle.

=============================================================================
REQUEST FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SIGTERM ──► ShutdownCoordinator ──► CancellationToken             │
    │                                            │                         │
    │                                            ▼ checked every loop      │
    │   client ──► SocketServer (accept loop, main thread)                │
    │                    │                                                 │
    │                    │ ConnectionJob(conn, root, index)               │
    │                    ▼                                                 │
    │              ThreadPool queue ──► Worker ──► handle_connection()    │
    │                                                  │                   │
    │                                                  ├─► resolve_path() │
    │                                                  ├─► read file      │
    │                                                  └─► respond, close │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
STARTUP AND SHUTDOWN ORDER
=============================================================================

    run()
      ├── 1. Configure logging
      ├── 2. Check root directory          (fatal: ValueError)
      ├── 3. Bind listening socket         (fatal: OSError)
      ├── 4. Install termination source    (block signals BEFORE threads)
      ├── 5. Start worker pool
      ├── 6. Start shutdown coordinator
      ├── 7. Accept loop                   (blocks until token cancelled)
      │
      └── finally:
            ├── Shut down pool             (drain queue, join workers)
            ├── Stop coordinator
            └── Uninstall termination source

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional

from . import __version__
from .config import ServerConfig
from .core import (
    SocketServer,
    Connection,
    ThreadPool,
    CancellationToken,
    ShutdownCoordinator,
    TerminationSource,
    SignalTermination,
)
from .handlers import ConnectionJob


logger = logging.getLogger(__name__)


class FileServer:
    """
    Concurrent static file server.

    =========================================================================
    USAGE
    =========================================================================

        # Blocking, stops on SIGTERM / Ctrl+C
        server = FileServer(ServerConfig(root_dir="./www", workers=4))
        server.run()

        # Embedded, stopped from code
        source = ManualTermination()
        server = FileServer(config, termination=source)
        threading.Thread(target=server.run).start()
        ...
        source.trigger()          # or server.stop()

    =========================================================================
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        termination: Optional[TerminationSource] = None,
    ):
        """
        Args:
            config: Server configuration. Uses defaults if not provided.
            termination: What ends the server. Defaults to SIGTERM/SIGINT.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self.termination = termination or SignalTermination()
        self.token = CancellationToken()

        self._socket_server = SocketServer(self.config)
        self._coordinator = ShutdownCoordinator(self.token, self.termination)
        self._pool: Optional[ThreadPool] = None
        self._root: Optional[Path] = None

    @property
    def address(self) -> tuple:
        """Bound (host, port); useful when the configured port is 0."""
        return self._socket_server.address

    @property
    def pool(self) -> Optional[ThreadPool]:
        return self._pool

    @property
    def root(self) -> Optional[Path]:
        return self._root

    # =========================================================================
    # STARTUP
    # =========================================================================

    def _check_root(self) -> Path:
        root = Path(self.config.root_dir)
        try:
            root = root.resolve(strict=True)
        except OSError:
            raise ValueError(f"Base directory not found: {self.config.root_dir}") from None

        if not root.is_dir():
            raise ValueError(f"Base directory is not a directory: {self.config.root_dir}")

        return root

    def bind(self):
        """
        Validate the root directory and bind the listening socket.

        Called by run(); may be called earlier to learn the bound port
        before the accept loop starts. Idempotent.

        Raises:
            ValueError: If the root directory is missing or not a directory.
            OSError: If the socket cannot be bound.
        """
        if self._root is None:
            self._root = self._check_root()
        self._socket_server.bind()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("staticd").setLevel(level)

    def _log_startup(self):
        host, port = self.address[:2]
        logger.info(f"staticd v{__version__}")
        logger.info(f"Opening staticd on {host}:{port}")
        logger.info(f"Base directory: {self._root}")
        logger.info(f"Index file: {self.config.index_file}")
        logger.info(f"Thread count: {self.config.workers}")

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Returns normally once the termination source fires (or stop() is
        called) and all in-flight connections have been answered.
        """
        self._setup_logging()
        self.bind()
        self._log_startup()

        self.termination.install()
        try:
            self._pool = ThreadPool(self.config.workers)
            self._coordinator.start()

            self._socket_server.serve(self.token, self._submit)
        finally:
            logger.info("Shutting down gracefully...")
            if self._pool is not None:
                self._pool.shutdown()
            self._coordinator.stop()
            self.termination.uninstall()
            logger.info("Server stopped")

    def stop(self):
        """Request shutdown from code. Safe to call from any thread."""
        self.token.cancel()

    def _submit(self, conn: Connection):
        job = ConnectionJob(
            connection=conn,
            root=self._root,
            index_file=self.config.index_file,
            buffer_size=self.config.buffer_size,
        )
        if not self._pool.execute(job):
            conn.close()
