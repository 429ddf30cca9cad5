"""
=============================================================================
REQUEST LINE PARSING
=============================================================================

Only the first line of a request is interpreted. Headers and body may be
present in the bytes we read, but nothing looks at them.

    GET /docs/index.html HTTP/1.1\\r\\n      ◄── parsed
    Host: localhost:8080\\r\\n               ◄── ignored
    User-Agent: curl/8.0\\r\\n               ◄── ignored
    \\r\\n

The request line has three whitespace-separated tokens:

    GET        /docs/index.html        HTTP/1.1
    ───        ────────────────        ────────
    method     path (still encoded)    version

=============================================================================
VALIDATION RULES
=============================================================================

    ┌────────────────────────────────────────────┬──────────────────────────┐
    │ Condition                                  │ Result                   │
    ├────────────────────────────────────────────┼──────────────────────────┤
    │ Empty first line / no path token           │ 400 Bad Request          │
    │ Version token is not exactly "HTTP/1.1"    │ 400 Bad Request          │
    │ Well-formed line, method is not "GET"      │ 405 Method Not Allowed   │
    │ Anything else                              │ RequestLine returned     │
    └────────────────────────────────────────────┴──────────────────────────┘

The method is checked exactly once, after the structural checks. Extra tokens
after the version are ignored.

=============================================================================
"""

from dataclasses import dataclass

from .status_codes import HTTPStatus


SUPPORTED_METHOD = "GET"
SUPPORTED_VERSION = "HTTP/1.1"


class HTTPParseError(Exception):
    """
    Raised when the request line cannot be accepted.

    Carries the HTTP status that should be sent back to the client, so the
    handler can respond without inspecting the message.
    """

    def __init__(self, message: str, status_code: HTTPStatus = HTTPStatus.BAD_REQUEST):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class RequestLine:
    """
    A validated request line.

    Attributes:
        method: Always "GET" once validation passes.
        path: Raw request target, still percent-encoded.
        version: Always "HTTP/1.1".
    """
    method: str
    path: str
    version: str


def first_line(data: bytes) -> str:
    """
    Decode the buffer and return its first line without the line terminator.

    Invalid UTF-8 is replaced rather than rejected; a mangled path simply
    fails to resolve later on.
    """
    text = data.decode("utf-8", errors="replace")
    return text.split("\n", 1)[0].rstrip("\r")


def parse_request_line(data: bytes) -> RequestLine:
    """
    Parse and validate the request line at the start of ``data``.

    Args:
        data: Raw bytes read from the client (a single read, possibly
              truncated).

    Returns:
        The validated RequestLine.

    Raises:
        HTTPParseError: With status 400 for malformed lines and 405 for
                        methods other than GET.
    """
    tokens = first_line(data).split()

    if len(tokens) < 2:
        raise HTTPParseError("Malformed request line")

    method, path = tokens[0], tokens[1]
    version = tokens[2] if len(tokens) > 2 else None

    if version != SUPPORTED_VERSION:
        raise HTTPParseError(f"Unsupported version: {version}")

    if method != SUPPORTED_METHOD:
        raise HTTPParseError(
            f"Method not allowed: {method}",
            status_code=HTTPStatus.METHOD_NOT_ALLOWED,
        )

    return RequestLine(method=method, path=path, version=version)
