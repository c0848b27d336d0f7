"""
=============================================================================
SERVER-SCOPED STATE
=============================================================================

Mutable state owned by one running server instance, shared by every
request that instance handles.

=============================================================================
THE LOST-UPDATE PROBLEM
=============================================================================

Worker threads handle requests in parallel. "count += 1" is a read, an
add and a write, and two threads can interleave between them:

    Thread A                 Thread B
    ────────                 ────────
    read  count (0)
                             read  count (0)
    write count (1)
                             write count (1)    ← one visit lost

Both visitors are told they are number 1.

=============================================================================
THE FIX: ONE HOLDER AT A TIME
=============================================================================

StateCell wraps the state in a threading.Lock and only hands it out
inside a context manager:

    with cell.exclusive() as state:
        state.visit_count += 1
        count = state.visit_count

While one dispatch is inside the block every other dispatch waits at
exclusive(), so each one sees the previous write and no two of them can
end up with the same count.

=============================================================================
"""

import threading
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Iterator, Optional


class StateAccessError(RuntimeError):
    """Exclusive access to the server state could not be obtained."""


@dataclass
class ServerState:
    """
    Per-server mutable state.

    Attributes:
        visit_count: Number of greetings served since startup. Starts at
                     zero, only ever incremented by one.
    """

    visit_count: int = 0

    def record_visit(self) -> int:
        """Increment the visit counter and return the new value."""
        self.visit_count += 1
        return self.visit_count


class StateCell:
    """
    Lock-guarded owner of a ServerState.

    The server builds one cell at construction time and passes it to its
    request handler on every dispatch. The state lives as long as the
    server object; a new server starts over at zero.
    """

    def __init__(self, state: Optional[ServerState] = None):
        self._state = state if state is not None else ServerState()
        self._lock = threading.Lock()

    @contextmanager
    def exclusive(self, timeout: Optional[float] = None) -> Iterator[ServerState]:
        """
        Hold the state exclusively for the duration of the block.

        Args:
            timeout: Seconds to wait for the lock. None waits forever.

        Raises:
            StateAccessError: If the lock was not acquired in time.
        """
        acquired = self._lock.acquire(timeout=-1 if timeout is None else timeout)
        if not acquired:
            raise StateAccessError(f"Could not lock server state within {timeout}s")
        try:
            yield self._state
        finally:
            self._lock.release()

    def snapshot(self) -> ServerState:
        """Copy of the current state, read under the lock."""
        with self._lock:
            return replace(self._state)

    @property
    def visit_count(self) -> int:
        return self.snapshot().visit_count
