"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the hello-counter server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m hellocounter --port 3000                        │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── HELLO_PORT=3000 python -m hellocounter                    │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The defaults match the deployed greeting service: every interface, port
8337. Nothing here is read by the request handler itself; host, port and
worker counts only shape the listener around it.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8337


@dataclass
class ServerConfig:
    """
    Configuration for the greeting server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout

    HTTP SETTINGS
    - keep_alive, keep_alive_timeout, max_request_size

    THREADING SETTINGS
    - min_workers, max_workers

    LOGGING / IDENTITY
    - log_level, server_name

    =========================================================================
    EXAMPLES
    =========================================================================

    Local development:
        ServerConfig(
            host="127.0.0.1",    # Localhost only
            port=8080,
            log_level="DEBUG",
        )

    Deployed instance:
        ServerConfig()           # 0.0.0.0:8337, INFO logging

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = DEFAULT_HOST
    """
    The IP address to bind to.
    - "0.0.0.0" - All network interfaces (default)
    - "127.0.0.1" - Localhost only
    """

    port: int = DEFAULT_PORT
    """
    The port number to listen on. 0 lets the OS pick a free port,
    which the tests rely on.
    """

    backlog: int = 128
    """Maximum number of queued connections before new ones are refused."""

    buffer_size: int = 8192
    """Size of each socket read in bytes."""

    timeout: Optional[float] = 30.0
    """
    Socket timeout in seconds for the first request on a connection.
    None = blocking (infinite wait).
    """

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    keep_alive: bool = True
    """Allow several requests on the same TCP connection."""

    keep_alive_timeout: float = 5.0
    """Idle seconds before a kept-alive connection is closed."""

    max_request_size: int = 1024 * 1024  # 1 MB
    """
    Maximum accepted request size in bytes. Only the query string is
    consumed, so this stays small.
    """

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    """Worker threads created at startup."""

    max_workers: int = 16
    """Upper bound on worker threads when the pool scales up."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING / IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    server_name: str = "hello-counter/1.0"
    """Value of the Server response header."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        HELLO_HOST       Server host (default: 0.0.0.0)
        HELLO_PORT       Server port (default: 8337)
        HELLO_WORKERS    Max worker threads (default: 16)
        HELLO_TIMEOUT    Request timeout in seconds (default: 30)
        HELLO_LOG_LEVEL  Logging level (default: INFO)

        =====================================================================
        """
        max_workers = int(os.getenv("HELLO_WORKERS", "16"))
        return cls(
            host=os.getenv("HELLO_HOST", DEFAULT_HOST),
            port=int(os.getenv("HELLO_PORT", str(DEFAULT_PORT))),
            min_workers=min(4, max_workers),
            max_workers=max_workers,
            timeout=float(os.getenv("HELLO_TIMEOUT", "30")),
            log_level=os.getenv("HELLO_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once when the server is built, so a bad port or worker
        count fails at startup rather than on the first connection.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.keep_alive_timeout <= 0:
            raise ValueError("keep_alive_timeout must be > 0")
