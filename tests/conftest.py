"""
pytest configuration and fixtures.
"""

import http.client
import socket
from typing import Generator, Optional

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hellocounter import HTTPServer, ServerConfig, serve_in_background


@pytest.fixture
def sample_root_request() -> bytes:
    """GET / with a name parameter."""
    return (
        b"GET /?name=Ada HTTP/1.1\r\n"
        b"Host: localhost:8337\r\n"
        b"User-Agent: pytest\r\n"
        b"Connection: keep-alive\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_missing_request() -> bytes:
    """GET for a path that does not exist."""
    return (
        b"GET /missing HTTP/1.1\r\n"
        b"Host: localhost:8337\r\n"
        b"Connection: close\r\n"
        b"\r\n"
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def config(free_port: int) -> ServerConfig:
    """Test server configuration bound to localhost."""
    return ServerConfig(
        host="127.0.0.1",
        port=free_port,
        min_workers=2,
        max_workers=8,
        timeout=5.0,
        keep_alive_timeout=1.0,
        log_level="WARNING",
    )


class RunningServer:
    """A server running on a background thread, plus a small client."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread = serve_in_background(server)

    @property
    def port(self) -> int:
        return self.server.address[1]

    def get(self, target: str, headers: Optional[dict] = None):
        """
        One request on a fresh connection.

        Returns:
            (status, body text, response headers as a dict)
        """
        conn = http.client.HTTPConnection("127.0.0.1", self.port, timeout=5.0)
        try:
            conn.request("GET", target, headers=headers or {})
            response = conn.getresponse()
            body = response.read().decode("utf-8")
            return response.status, body, dict(response.getheaders())
        finally:
            conn.close()

    def stop(self):
        self.server.shutdown()
        self._thread.join(timeout=10.0)


@pytest.fixture
def running_server(config: ServerConfig) -> Generator[RunningServer, None, None]:
    """A fresh greeting server listening on a free port."""
    running = RunningServer(HTTPServer(config))

    yield running

    running.stop()


@pytest.fixture
def make_server(config: ServerConfig):
    """
    Factory for extra running servers, e.g. with a custom handler.

    Each call gets its own free port. Everything started is stopped at
    teardown.
    """
    started = []

    def factory(**kwargs) -> RunningServer:
        server_config = ServerConfig(**{**vars(config), "port": 0})
        running = RunningServer(HTTPServer(server_config, **kwargs))
        started.append(running)
        return running

    yield factory

    for running in started:
        running.stop()
