"""
=============================================================================
HTTP MODULE
=============================================================================

The protocol pieces of the daemon, kept free of any socket code:

    request.py       Request line parsing and validation
    response.py      Response serialization
    status_codes.py  The five status codes the server produces
    mime_types.py    Extension → Content-Type lookup

=============================================================================
"""

from .status_codes import HTTPStatus
from .request import HTTPParseError, RequestLine, parse_request_line
from .response import HTTPResponse, ok, error
from .mime_types import get_mime_type

__all__ = [
    "HTTPStatus",
    "HTTPParseError",
    "RequestLine",
    "parse_request_line",
    "HTTPResponse",
    "ok",
    "error",
    "get_mime_type",
]
