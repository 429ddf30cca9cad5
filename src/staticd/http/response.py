"""
=============================================================================
HTTP RESPONSE SERIALIZATION
=============================================================================

Every response has the same four-header shape:

    HTTP/1.1 200 OK\\r\\n                    ◄── Status line
    Content-Type: text/html\\r\\n            ◄── From the MIME table
    Content-Length: 1234\\r\\n               ◄── Exact body size in bytes
    Connection: close\\r\\n                  ◄── We never keep connections
    \\r\\n                                   ◄── End of headers
    <html>...                             ◄── Body (empty for errors)

Content-Length is always sent, even when it is zero. Since the server closes
the connection after every response, clients could also read until EOF, but
an explicit length lets them detect truncation.

=============================================================================
"""

from dataclasses import dataclass

from .status_codes import HTTPStatus


DEFAULT_CONTENT_TYPE = "text/plain"


@dataclass
class HTTPResponse:
    """
    A response ready to be written to the socket.

    Attributes:
        status: HTTP status code.
        content_type: Value of the Content-Type header.
        body: Response body bytes.
    """
    status: HTTPStatus = HTTPStatus.OK
    content_type: str = DEFAULT_CONTENT_TYPE
    body: bytes = b""

    @property
    def status_line(self) -> str:
        """e.g. ``HTTP/1.1 404 Not Found``"""
        return f"HTTP/1.1 {self.status.value} {self.status.phrase}"

    def header_bytes(self) -> bytes:
        """Serialize the status line and headers, including the blank line."""
        lines = [
            self.status_line,
            f"Content-Type: {self.content_type}",
            f"Content-Length: {len(self.body)}",
            "Connection: close",
        ]
        return ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1")

    def to_bytes(self) -> bytes:
        """Serialize the complete response."""
        return self.header_bytes() + self.body


def ok(body: bytes, content_type: str) -> HTTPResponse:
    """200 OK carrying file contents."""
    return HTTPResponse(status=HTTPStatus.OK, content_type=content_type, body=body)


def error(status: HTTPStatus) -> HTTPResponse:
    """Bodiless error response (400, 404, 405, 500)."""
    return HTTPResponse(status=status, content_type=DEFAULT_CONTENT_TYPE)
