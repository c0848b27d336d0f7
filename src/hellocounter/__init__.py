"""
=============================================================================
HELLOCOUNTER - A Greeting Server With a Visitor Counter
=============================================================================

A small HTTP/1.1 server built on raw sockets. It answers "/" with a
greeting and the visitor's number, and everything else with 404.

    $ curl "localhost:8337/?name=Ada"

    hello Ada
    you are visitor number 2

    pass the 'name' parameter to receive a warm personal greeting.

    $ curl localhost:8337/foo
    Not Found: /foo

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    hellocounter/
    ├── __init__.py          # Package exports
    ├── __main__.py          # CLI entry point (python -m hellocounter)
    ├── server.py            # HTTPServer: listener + pool + handler + state
    ├── handler.py           # Greeting handler and dispatch()
    ├── state.py             # ServerState and its lock-guarded StateCell
    ├── config.py            # ServerConfig dataclass
    ├── core/                # Networking
    │   ├── socket_server.py
    │   ├── connection.py
    │   └── thread_pool.py
    └── http/                # Protocol
        ├── request.py
        ├── response.py
        ├── router.py
        └── status_codes.py

=============================================================================
QUICK START
=============================================================================

    from hellocounter import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(host="127.0.0.1", port=8337))
    server.run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .handler import dispatch, handle
from .server import HTTPServer, serve_in_background
from .state import ServerState, StateCell, StateAccessError

__all__ = [
    "HTTPServer",
    "ServerConfig",
    "ServerState",
    "StateCell",
    "StateAccessError",
    "dispatch",
    "handle",
    "serve_in_background",
    "__version__",
]
