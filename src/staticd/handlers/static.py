"""
=============================================================================
STATIC FILE REQUEST HANDLER
=============================================================================

Handles exactly one request on one connection, then closes it.

=============================================================================
REQUEST STATE MACHINE
=============================================================================

    ┌──────────┐  0 bytes / error   ┌───────────────────────────────┐
    │   READ   │ ─────────────────► │ close, no response            │
    └────┬─────┘                    └───────────────────────────────┘
         │ bytes
         ▼
    ┌──────────┐  malformed         ┌───────────────────────────────┐
    │  PARSE   │ ─────────────────► │ 400 Bad Request               │
    └────┬─────┘  not GET  ───────► │ 405 Method Not Allowed        │
         │                          └───────────────────────────────┘
         ▼
    ┌──────────┐  rejected          ┌───────────────────────────────┐
    │ RESOLVE  │ ─────────────────► │ 404 Not Found                 │
    └────┬─────┘                    └───────────────────────────────┘
         ▼
    ┌──────────┐  read failed       ┌───────────────────────────────┐
    │  SERVE   │ ─────────────────► │ 500 Internal Server Error     │
    └────┬─────┘                    └───────────────────────────────┘
         ▼
      200 OK + file bytes

Every branch ends with the connection closed. Errors never escape this
function; one bad request cannot affect another connection.

=============================================================================
KNOWN LIMITATION: SINGLE READ
=============================================================================

The request is read with ONE recv() of up to 4096 bytes. A request line
that is longer than the buffer, or that arrives split across TCP segments,
is parsed as-is and typically rejected with 400. This keeps the handler
simple and bounds how long a worker waits on a client.

=============================================================================
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from ..core.connection import Connection
from ..http.request import HTTPParseError, parse_request_line
from ..http.response import HTTPResponse, ok, error
from ..http.status_codes import HTTPStatus
from ..http.mime_types import get_mime_type
from .resolver import resolve_path


logger = logging.getLogger(__name__)


DEFAULT_BUFFER_SIZE = 4096


def handle_connection(
    conn: Connection,
    root: Path,
    index_file: str,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
):
    """
    Serve a single request on ``conn`` and close it.

    Args:
        conn: The accepted client connection.
        root: Root directory to serve from.
        index_file: File served for "/".
        buffer_size: Size of the single read.
    """
    with conn:
        logger.debug(f"[{conn.id}] Connection from: {conn.peer}")

        try:
            data = conn.read_once(buffer_size)
        except OSError as e:
            logger.error(f"[{conn.id}] Failed to read from stream: {e}")
            return

        if not data:
            # Client closed the connection without sending anything
            return

        response = build_response(data, root, index_file, conn.id)
        send_response(conn, response)


def build_response(data: bytes, root: Path, index_file: str, conn_id: str = "-") -> HTTPResponse:
    """Turn the raw request bytes into a response. Never raises."""
    try:
        request = parse_request_line(data)
    except HTTPParseError as e:
        logger.info(f"[{conn_id}] Responded with {e.status_code.value} {e.status_code.phrase}: {e}")
        return error(e.status_code)

    logger.debug(f"[{conn_id}] Requested path: {request.path}")

    file_path = resolve_path(root, request.path, index_file)
    if file_path is None:
        logger.info(f"[{conn_id}] {request.path} - Responded with 404 Not Found")
        return error(HTTPStatus.NOT_FOUND)

    try:
        contents = file_path.read_bytes()
    except OSError as e:
        logger.error(f"[{conn_id}] Error reading {file_path}: {e}")
        logger.info(f"[{conn_id}] {request.path} - Responded with 500 Internal Server Error")
        return error(HTTPStatus.INTERNAL_SERVER_ERROR)

    logger.info(f"[{conn_id}] {request.path} - Responded with 200 OK")
    return ok(contents, get_mime_type(file_path))


def send_response(conn: Connection, response: HTTPResponse) -> bool:
    """
    Write the serialized response in one sendall().

    A failed write is logged by the connection; the caller closes it
    either way.
    """
    return conn.send(response.to_bytes())


@dataclass
class ConnectionJob:
    """
    One unit of work for the thread pool: a connection plus the read-only
    settings needed to answer it.

    Calling the job handles the connection. A job is executed exactly once
    and never requeued.
    """
    connection: Connection
    root: Path
    index_file: str
    buffer_size: int = DEFAULT_BUFFER_SIZE

    def __call__(self):
        handle_connection(self.connection, self.root, self.index_file, self.buffer_size)
