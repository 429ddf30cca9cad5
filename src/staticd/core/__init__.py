"""
=============================================================================
CORE MODULE - Concurrency and Networking Foundation
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        CORE COMPONENTS                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌────────────────┐    ┌────────────────┐    ┌────────────────┐    │
    │  │ SocketServer   │───▶│   Connection   │───▶│  ThreadPool    │    │
    │  │ (accept loop)  │    │  (one request) │    │  (workers)     │    │
    │  └───────▲────────┘    └────────────────┘    └────────────────┘    │
    │          │ token                                                    │
    │  ┌───────┴─────────────┐                                           │
    │  │ ShutdownCoordinator │◄── SIGTERM / SIGINT                       │
    │  └─────────────────────┘                                           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import ThreadPool, Worker, WorkerState
from .shutdown import (
    CancellationToken,
    ShutdownCoordinator,
    TerminationSource,
    SignalTermination,
    ManualTermination,
)

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "ThreadPool",
    "Worker",
    "WorkerState",
    "CancellationToken",
    "ShutdownCoordinator",
    "TerminationSource",
    "SignalTermination",
    "ManualTermination",
]
