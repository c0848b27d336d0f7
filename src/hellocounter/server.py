"""
=============================================================================
GREETING SERVER
=============================================================================

Ties the listener, the worker pool, the request parser and the single
request handler together, and owns the state that handler mutates.

=============================================================================
ARCHITECTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                            HTTPServer                                │
    │                                                                      │
    │   SocketServer ──conn──► ThreadPool ──► _process_connection(conn)   │
    │                                              │                       │
    │                                              ▼                       │
    │                                   RequestParser.parse(bytes)         │
    │                                              │                       │
    │                                              ▼                       │
    │                              handler(request, StateCell)  ◄── one    │
    │                                              │              callback │
    │                                              ▼                       │
    │                               HTTPResponse.to_bytes() ──► socket     │
    │                                                                      │
    │   StateCell ── ServerState(visit_count) ── created with the server  │
    └─────────────────────────────────────────────────────────────────────┘

The server is configured with exactly one handler at construction time.
By default that is handler.dispatch, which classifies the path and
greets or answers 404. Any callable with the same signature can be
swapped in.

=============================================================================
ERRORS
=============================================================================

    Parse error (HTTPParseError)   → its status code, connection closed
    First read timed out           → 408, connection closed
    Thread pool queue full         → 503, connection closed
    Handler raised                 → 500 for that request only, logged
                                     with traceback; the connection and
                                     the worker carry on

=============================================================================
"""

import logging
import threading
from typing import Optional, Tuple

from .config import ServerConfig
from .core import Connection, ConnectionState, SocketServer, ThreadPool
from .handler import RequestHandler, dispatch
from .http import HTTPMethod, HTTPParseError, HTTPStatus, RequestParser, error_response
from .state import StateCell


logger = logging.getLogger(__name__)


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level_name: str):
    """Configure the root logger and the package logger level."""
    level = getattr(logging, level_name.upper(), logging.INFO)

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    logging.getLogger("hellocounter").setLevel(level)


class HTTPServer:
    """
    HTTP server with a single request handler and per-instance state.

    Usage:
        server = HTTPServer(ServerConfig(port=8337))
        server.run()  # Blocks until Ctrl+C / SIGTERM / shutdown()

    Custom handler:
        def handler(request, cell):
            with cell.exclusive() as state:
                ...
            return HTTPResponse.ok("hi")

        HTTPServer(config, handler=handler).run()
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        handler: RequestHandler = dispatch,
    ):
        self.config = config or ServerConfig()
        self.config.validate()

        self._handler = handler
        self._state = StateCell()

        self._socket_server = SocketServer(self.config)
        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            max_workers=self.config.max_workers,
        )
        self._parser = RequestParser(max_request_size=self.config.max_request_size)

        self._running = False

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def state(self) -> StateCell:
        """The state cell handed to the handler on every request."""
        return self._state

    @property
    def visit_count(self) -> int:
        return self._state.visit_count

    @property
    def address(self) -> Optional[Tuple[str, int]]:
        """Bound (host, port) once listening, None before."""
        return self._socket_server.bound_address

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None, configure_logging: bool = True):
        """
        Start serving. Blocks until shutdown.

        Args:
            host: Override config host.
            port: Override config port.
            configure_logging: Call setup_logging() from the config level.
        """
        if host is not None:
            self.config.host = host
        if port is not None:
            self.config.port = port

        if configure_logging:
            setup_logging(self.config.log_level)

        self._running = True
        self._thread_pool.start()

        logger.info(
            f"Starting {self.config.server_name} on {self.config.host}:{self.config.port} "
            f"({self.config.min_workers}-{self.config.max_workers} workers)"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def wait_until_listening(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_listening(timeout)

    def shutdown(self):
        """Ask a running server to stop. Safe from any thread."""
        self._running = False
        self._socket_server.shutdown()

    def _shutdown(self):
        logger.info("Shutting down server...")
        self._running = False
        self._thread_pool.shutdown(wait=True, timeout=self.config.keep_alive_timeout + 1.0)
        logger.info(f"Server stopped after {self.visit_count} visits")

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """Queue an accepted connection on the thread pool (accept thread)."""
        submitted = self._thread_pool.submit(
            self._process_connection,
            args=(conn,),
            timeout=self.config.timeout,
            on_stale=self._reject_stale,
        )

        if not submitted:
            logger.warning(f"[{conn.id}] Thread pool full, rejecting connection")
            self._send_error(conn, HTTPStatus.SERVICE_UNAVAILABLE, "Server overloaded")
            conn.close()

    def _reject_stale(self, conn: Connection):
        """Answer a connection that waited too long in the queue (worker thread)."""
        logger.warning(f"[{conn.id}] Waited too long for a worker, rejecting connection")
        self._send_error(conn, HTTPStatus.SERVICE_UNAVAILABLE, "Server overloaded")
        conn.close()

    def _process_connection(self, conn: Connection):
        """
        Serve one connection (worker thread).

        Read → parse → handle → send, repeated while the client keeps
        the connection alive and the server is running.
        """
        with conn:
            while self._running:
                try:
                    raw_request = conn.read_request()
                except TimeoutError:
                    self._send_error(conn, HTTPStatus.REQUEST_TIMEOUT, "Request timeout")
                    break
                except ValueError as e:
                    self._send_error(conn, HTTPStatus.PAYLOAD_TOO_LARGE, str(e))
                    break

                if raw_request is None:
                    break

                try:
                    request = self._parser.parse(raw_request, conn.address)
                except HTTPParseError as e:
                    logger.info(f"[{conn.id}] Rejected request: {e}")
                    self._send_error(conn, e.status_code, str(e))
                    break

                conn.state = ConnectionState.PROCESSING

                try:
                    response = self._handler(request, self._state)
                except Exception as e:
                    logger.exception(f"[{conn.id}] Handler error: {e}")
                    response = error_response(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal Server Error")

                keep_alive = request.is_keep_alive and self.config.keep_alive and self._running
                if keep_alive:
                    headers = {
                        "Connection": "keep-alive",
                        "Keep-Alive": f"timeout={int(self.config.keep_alive_timeout)}",
                    }
                else:
                    headers = {"Connection": "close"}

                # HEAD gets the same headers as GET, Content-Length included, but no body.
                data = response.to_bytes(
                    self.config.server_name,
                    headers,
                    include_body=request.method is not HTTPMethod.HEAD,
                )
                if not conn.send_response(data):
                    break

                if not keep_alive:
                    break

                conn.set_keep_alive()

    def _send_error(self, conn: Connection, status: int, message: str):
        """Send a plain-text error and mark the connection for closing."""
        response = error_response(status, message)
        conn.send_response(response.to_bytes(self.config.server_name, {"Connection": "close"}))


def serve_in_background(server: HTTPServer, timeout: float = 5.0) -> threading.Thread:
    """
    Run a server on a daemon thread and wait until it is listening.

    Signal handlers are not installed off the main thread, so stop it
    with server.shutdown().

    Raises:
        RuntimeError: If the server is not listening within `timeout`.
    """
    thread = threading.Thread(
        target=server.run,
        kwargs={"configure_logging": False},
        name="hellocounter-server",
        daemon=True,
    )
    thread.start()

    if not server.wait_until_listening(timeout):
        server.shutdown()
        raise RuntimeError("Server failed to start")
    return thread
