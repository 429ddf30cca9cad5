"""
pytest configuration and fixtures.
"""

import os
import socket
import threading
from pathlib import Path
from typing import Generator

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from staticd import FileServer, ServerConfig
from staticd.core import ManualTermination


INDEX_HTML = b"<!DOCTYPE html><html><body><h1>home</h1></body></html>"
EXISTING_HTML = b"<html><body>existing</body></html>"
SECRET = b"top secret, outside the root"


@pytest.fixture
def www(tmp_path: Path) -> Path:
    """
    A served root directory:

        tmp_path/
        ├── secret.txt            ← outside the root
        └── www/
            ├── index.html
            ├── existing.html
            ├── with space.txt
            ├── data.bin
            ├── docs/guide.txt
            ├── escape.txt        → ../secret.txt (symlink, if supported)
            └── alias.html        → existing.html (symlink, if supported)
    """
    (tmp_path / "secret.txt").write_bytes(SECRET)

    root = tmp_path / "www"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_HTML)
    (root / "existing.html").write_bytes(EXISTING_HTML)
    (root / "with space.txt").write_bytes(b"spaced out")
    (root / "data.bin").write_bytes(bytes(range(256)))
    (root / "docs").mkdir()
    (root / "docs" / "guide.txt").write_bytes(b"read the guide")

    try:
        os.symlink(tmp_path / "secret.txt", root / "escape.txt")
        os.symlink(root / "existing.html", root / "alias.html")
    except (OSError, NotImplementedError):
        pass

    return root


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def config(www: Path) -> ServerConfig:
    """Test configuration: ephemeral port, fast polling."""
    return ServerConfig(
        address="127.0.0.1:0",
        root_dir=str(www),
        workers=2,
        poll_interval=0.05,
        log_level="WARNING",
    )


def recv_all(sock: socket.socket) -> bytes:
    chunks = []
    while True:
        chunk = sock.recv(65536)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def parse_response(raw: bytes) -> tuple[int, dict, bytes]:
    """Split a raw response into (status, headers, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    status = int(lines[0].split()[1])
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip()] = value.strip()
    return status, headers, body


class TestServer:
    """Test server helper that runs FileServer in a background thread."""

    def __init__(self, server: FileServer, source: ManualTermination):
        self.server = server
        self.source = source
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    @property
    def thread(self) -> threading.Thread:
        return self._thread

    def start(self):
        # Bind first so the port is known and connections queue in the kernel
        self.server.bind()
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 5.0):
        self.source.trigger()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=timeout)

    def request(self, raw: bytes) -> bytes:
        """Send raw request bytes and read the full response."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as s:
            s.sendall(raw)
            return recv_all(s)

    def send(self, raw: bytes) -> tuple[int, dict, bytes]:
        return parse_response(self.request(raw))

    def get(self, path: str) -> tuple[int, dict, bytes]:
        return self.send(f"GET {path} HTTP/1.1\r\nHost: localhost\r\n\r\n".encode())

    @staticmethod
    def read_response(sock: socket.socket) -> tuple[int, dict, bytes]:
        """Read and parse a response from an already-open client socket."""
        return parse_response(recv_all(sock))


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """A running server, stopped after the test."""
    source = ManualTermination()
    server = TestServer(FileServer(config, termination=source), source)
    server.start()

    yield server

    server.stop()
