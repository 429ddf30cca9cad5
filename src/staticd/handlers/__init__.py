"""
=============================================================================
HANDLERS MODULE
=============================================================================

Per-connection request handling:

    resolver.py   resolve_path(): request path → safe file path, or None
    static.py     handle_connection(): read → parse → resolve → respond
                  ConnectionJob: the unit of work queued for the pool

=============================================================================
"""

from .resolver import resolve_path
from .static import handle_connection, build_response, ConnectionJob

__all__ = [
    "resolve_path",
    "handle_connection",
    "build_response",
    "ConnectionJob",
]
