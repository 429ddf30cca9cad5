"""
Unit tests for response serialization, status codes and MIME lookup.
"""

import pytest

from staticd.http.response import HTTPResponse, ok, error
from staticd.http.status_codes import HTTPStatus
from staticd.http.mime_types import get_mime_type, DEFAULT_MIME_TYPE


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_status_line(self):
        assert HTTPResponse(status=HTTPStatus.OK).status_line == "HTTP/1.1 200 OK"
        assert HTTPResponse(status=HTTPStatus.NOT_FOUND).status_line == "HTTP/1.1 404 Not Found"

    def test_ok_serialization(self):
        response = ok(b"<h1>hi</h1>", "text/html")

        assert response.to_bytes() == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/html\r\n"
            b"Content-Length: 11\r\n"
            b"Connection: close\r\n"
            b"\r\n"
            b"<h1>hi</h1>"
        )

    def test_error_has_no_body(self):
        response = error(HTTPStatus.BAD_REQUEST)

        assert response.body == b""
        assert response.to_bytes() == (
            b"HTTP/1.1 400 Bad Request\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 0\r\n"
            b"Connection: close\r\n"
            b"\r\n"
        )

    def test_content_length_counts_bytes(self):
        body = "café".encode("utf-8")
        assert b"Content-Length: 5\r\n" in ok(body, "text/plain").header_bytes()

    def test_header_bytes_end_with_blank_line(self):
        assert ok(b"x", "text/plain").header_bytes().endswith(b"\r\n\r\n")


class TestHTTPStatus:
    """Tests for HTTPStatus enum."""

    @pytest.mark.parametrize("status,phrase", [
        (HTTPStatus.OK, "OK"),
        (HTTPStatus.BAD_REQUEST, "Bad Request"),
        (HTTPStatus.NOT_FOUND, "Not Found"),
        (HTTPStatus.METHOD_NOT_ALLOWED, "Method Not Allowed"),
        (HTTPStatus.INTERNAL_SERVER_ERROR, "Internal Server Error"),
    ])
    def test_phrases(self, status: HTTPStatus, phrase: str):
        assert status.phrase == phrase

    def test_int_compatible(self):
        assert HTTPStatus.METHOD_NOT_ALLOWED == 405


class TestMimeTypes:
    """Tests for get_mime_type()."""

    @pytest.mark.parametrize("name,expected", [
        ("index.html", "text/html"),
        ("/srv/www/style.css", "text/css"),
        ("app.js", "text/javascript"),
        ("logo.PNG", "image/png"),
        ("notes.txt", "text/plain"),
        ("data.json", "application/json"),
    ])
    def test_known_extensions(self, name: str, expected: str):
        assert get_mime_type(name) == expected

    def test_unknown_extension(self):
        assert get_mime_type("archive.unknown") == DEFAULT_MIME_TYPE
        assert get_mime_type("Makefile") == "application/octet-stream"

    def test_custom_default(self):
        assert get_mime_type("data.xyz", default="text/plain") == "text/plain"
