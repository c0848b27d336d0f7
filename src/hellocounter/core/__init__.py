"""
=============================================================================
CORE NETWORKING COMPONENTS
=============================================================================

    socket_server.py  Listening socket, accept loop, signal handling
    connection.py     Buffered request reads / response writes per client
    thread_pool.py    Worker threads that process accepted connections

Nothing in here knows about routes, greetings or the visit counter.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "ThreadPool",
]
