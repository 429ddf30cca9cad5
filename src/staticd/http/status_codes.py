"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The daemon speaks a deliberately tiny subset of HTTP, so it only ever
produces five status codes:

    ┌──────┬─────────────────────────┬────────────────────────────────────┐
    │ Code │ Phrase                  │ When                               │
    ├──────┼─────────────────────────┼────────────────────────────────────┤
    │ 200  │ OK                      │ File found and read                │
    │ 400  │ Bad Request             │ Malformed request line             │
    │ 404  │ Not Found               │ Missing file OR rejected path      │
    │ 405  │ Method Not Allowed      │ Anything other than GET            │
    │ 500  │ Internal Server Error   │ File resolved but could not be read│
    └──────┴─────────────────────────┴────────────────────────────────────┘

Note that 404 covers both "does not exist" and "you are not allowed to see
this". A traversal attempt looks exactly like a missing file to the client.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes produced by the server.

    This enum extends IntEnum, so status codes can be used as integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200
    BAD_REQUEST = 400
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      │
                      │      └── Reason phrase
                      └───────── Status code
        """
        return _STATUS_PHRASES.get(self, "Unknown")


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
