"""
End-to-end tests against a real listening server.

Each test gets a fresh server on a free localhost port (see conftest.py),
so visitor numbers always start at 1.
"""

import http.client
import re
import socket
from concurrent.futures import ThreadPoolExecutor

from hellocounter import HTTPServer, dispatch
from hellocounter.core import Connection
from hellocounter.http import HTTPResponse


VISITOR_PATTERN = re.compile(r"you are visitor number (\d+)")


def visitor_number(body: str) -> int:
    match = VISITOR_PATTERN.search(body)
    assert match, body
    return int(match.group(1))


def raw_exchange(port: int, data: bytes) -> bytes:
    """Send raw bytes, read until the server closes the connection."""
    with socket.create_connection(("127.0.0.1", port), timeout=5.0) as sock:
        sock.sendall(data)
        chunks = []
        while True:
            chunk = sock.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


class TestGreeting:
    """Tests for the greeting and not-found routes over HTTP."""

    def test_scenario(self, running_server):
        """Test "/", "/?name=Ada" and "/foo" against a fresh server."""
        status, body, headers = running_server.get("/")
        assert status == 200
        assert "hello world" in body
        assert visitor_number(body) == 1

        status, body, _ = running_server.get("/?name=Ada")
        assert status == 200
        assert "hello Ada" in body
        assert visitor_number(body) == 2

        status, body, _ = running_server.get("/foo")
        assert status == 404
        assert body == "Not Found: /foo"

        assert running_server.server.visit_count == 2

    def test_content_type_is_plain_text(self, running_server):
        """Test Content-Type for both routes."""
        _, _, ok_headers = running_server.get("/")
        _, _, missing_headers = running_server.get("/missing")

        assert ok_headers["Content-Type"] == "text/plain"
        assert missing_headers["Content-Type"] == "text/plain"

    def test_server_header(self, running_server):
        """Test that the configured server name is sent."""
        _, _, headers = running_server.get("/")

        assert headers["Server"] == running_server.server.config.server_name

    def test_method_does_not_affect_routing(self, running_server):
        """Test that POST / is greeted like GET /."""
        conn = http.client.HTTPConnection("127.0.0.1", running_server.port, timeout=5.0)
        try:
            conn.request("POST", "/?name=Bob", body=b"ignored")
            response = conn.getresponse()
            body = response.read().decode("utf-8")
        finally:
            conn.close()

        assert response.status == 200
        assert "hello Bob" in body

    def test_concurrent_requests_get_distinct_numbers(self, running_server):
        """Test distinct visitor numbers under concurrent clients."""
        k = 40

        def visit(_):
            status, body, _ = running_server.get("/")
            assert status == 200
            return visitor_number(body)

        with ThreadPoolExecutor(max_workers=8) as executor:
            numbers = list(executor.map(visit, range(k)))

        assert sorted(numbers) == list(range(1, k + 1))

    def test_servers_count_independently(self, running_server, make_server):
        """Test that two servers keep separate counters."""
        other = make_server()

        running_server.get("/")
        running_server.get("/")
        _, body, _ = other.get("/")

        assert visitor_number(body) == 1
        assert running_server.server.visit_count == 2


class TestConnection:
    """Tests for connection handling and request rejection."""

    def test_keep_alive_serves_several_requests(self, running_server):
        """Test several requests on one connection."""
        conn = http.client.HTTPConnection("127.0.0.1", running_server.port, timeout=5.0)
        try:
            numbers = []
            for _ in range(3):
                conn.request("GET", "/")
                response = conn.getresponse()
                assert response.getheader("Connection") == "keep-alive"
                numbers.append(visitor_number(response.read().decode("utf-8")))
        finally:
            conn.close()

        assert numbers == [1, 2, 3]

    def test_connection_close_is_honoured(self, running_server):
        """Test that Connection: close ends the connection."""
        reply = raw_exchange(
            running_server.port,
            b"GET /?name=Ada HTTP/1.1\r\nHost: localhost\r\nConnection: close\r\n\r\n",
        )

        assert reply.startswith(b"HTTP/1.1 200 OK\r\n")
        assert b"Connection: close\r\n" in reply
        assert b"hello Ada" in reply

    def test_unknown_method_is_rejected(self, running_server):
        """Test 405 for an unknown method."""
        reply = raw_exchange(running_server.port, b"BREW / HTTP/1.1\r\nHost: localhost\r\n\r\n")

        assert reply.startswith(b"HTTP/1.1 405 Method Not Allowed\r\n")
        assert running_server.server.visit_count == 0

    def test_malformed_request_line_is_rejected(self, running_server):
        """Test 400 for a malformed request line."""
        reply = raw_exchange(running_server.port, b"nonsense\r\n\r\n")

        assert reply.startswith(b"HTTP/1.1 400 Bad Request\r\n")

    def test_unsupported_version_is_rejected(self, running_server):
        """Test 505 for an unsupported version."""
        reply = raw_exchange(running_server.port, b"GET / HTTP/2.0\r\n\r\n")

        assert reply.startswith(b"HTTP/1.1 505 ")

    def test_head_sends_headers_without_body(self, running_server):
        """Test that HEAD / gets Content-Length but no greeting bytes."""
        reply = raw_exchange(
            running_server.port,
            b"HEAD / HTTP/1.1\r\nHost: localhost\r\nConnection: close\r\n\r\n",
        )

        head, _, rest = reply.partition(b"\r\n\r\n")
        assert head.startswith(b"HTTP/1.1 200 OK\r\n")
        assert b"Content-Length: " in head
        assert b"Content-Length: 0\r\n" not in head + b"\r\n"
        assert rest == b""

    def test_dot_dot_path_is_not_found(self, running_server):
        """Test that /.. is answered with 404 rather than 400."""
        reply = raw_exchange(running_server.port, b"GET /.. HTTP/1.1\r\nConnection: close\r\n\r\n")

        assert reply.startswith(b"HTTP/1.1 404 Not Found\r\n")
        assert reply.endswith(b"\r\n\r\nNot Found: /..")

    def test_encoded_slash_is_not_the_root(self, running_server):
        """Test that /%2F is a 404 and leaves the counter alone."""
        reply = raw_exchange(running_server.port, b"GET /%2F HTTP/1.1\r\nConnection: close\r\n\r\n")

        assert reply.endswith(b"\r\n\r\nNot Found: /%2F")
        assert running_server.server.visit_count == 0

    def test_stale_connection_gets_503(self, config):
        """Test that a connection dropped from the queue is answered and closed."""
        server = HTTPServer(config)
        server_side, client_side = socket.socketpair()
        client_side.settimeout(5.0)

        try:
            server._reject_stale(Connection(socket=server_side, address=("127.0.0.1", 0)))

            chunks = []
            while True:
                chunk = client_side.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        finally:
            client_side.close()

        reply = b"".join(chunks)
        assert reply.startswith(b"HTTP/1.1 503 Service Unavailable\r\n")
        assert reply.endswith(b"Server overloaded")


class TestHandlerFailure:
    """Tests for custom and failing handlers."""

    def test_failing_dispatch_answers_500_and_server_survives(self, make_server):
        """Test that a raising handler gives 500 and the next request works."""
        calls = []

        def flaky(request, cell):
            calls.append(request.path_string)
            if request.get_param("fail"):
                raise RuntimeError("boom")
            return dispatch(request, cell)

        running = make_server(handler=flaky)

        status, body, _ = running.get("/?fail=1")
        assert status == 500
        assert body == "Internal Server Error"

        status, body, _ = running.get("/")
        assert status == 200
        assert visitor_number(body) == 1
        assert calls == ["/", "/"]

    def test_custom_handler_receives_the_server_state(self, make_server):
        """Test that a custom handler gets the server's state cell."""
        def counter_only(request, cell):
            with cell.exclusive() as state:
                count = state.record_visit()
            return HTTPResponse.ok(str(count))

        running = make_server(handler=counter_only)

        running.get("/")
        _, body, _ = running.get("/anything")

        assert body == "2"
        assert running.server.visit_count == 2
