"""
=============================================================================
GREETING HANDLER
=============================================================================

The one request handler this server runs.

    HTTPRequest
        │
        ▼
    classify()  ──── NOT_FOUND ───► 404 "Not Found: /path"  (no lock taken)
        │
       ROOT
        │
        ▼
    cell.exclusive() ──► visit_count += 1 ──► lock released
                                                  │
                                                  ▼
                                  200 greeting with the new count

Both branches log one INFO record on the access logger with the method
and the rendered path. A 404 is an ordinary outcome here, not an error,
so it is never logged above INFO.

=============================================================================
WHAT RUNS UNDER THE LOCK
=============================================================================

Only the read-increment-write of the counter. Routing, formatting the
body and writing the log record all happen with the lock free, so a slow
log handler delays its own request and nobody else's:

    Thread A                         Thread B
    ────────                         ────────
    lock, count = 1, unlock
    format body, log ...             lock, count = 2, unlock
    ... still logging                format body, log

=============================================================================
"""

import logging
from typing import Callable, Optional

from .http.request import HTTPRequest
from .http.response import HTTPResponse, TEXT_PLAIN
from .http.router import Route, classify
from .http.status_codes import HTTPStatus
from .state import ServerState, StateCell


logger = logging.getLogger("hellocounter.access")


DEFAULT_NAME = "world"

GREETING_TEMPLATE = """
hello {name}
you are visitor number {count}

pass the 'name' parameter to receive a warm personal greeting.
"""

# Signature the server calls for every parsed request.
RequestHandler = Callable[[HTTPRequest, StateCell], HTTPResponse]


def greeting_name(request: HTTPRequest) -> str:
    """The `name` query parameter, or "world" when absent or empty."""
    return request.get_param("name") or DEFAULT_NAME


def not_found_response(request: HTTPRequest) -> HTTPResponse:
    return HTTPResponse.with_status(
        HTTPStatus.NOT_FOUND,
        f"Not Found: {request.path_string}",
        TEXT_PLAIN,
    )


def greeting_response(request: HTTPRequest, count: int) -> HTTPResponse:
    body = GREETING_TEMPLATE.format(name=greeting_name(request), count=count)
    return HTTPResponse.ok(body, TEXT_PLAIN)


def log_access(route: Route, request: HTTPRequest):
    """One INFO record per request: "GET: /" or "GET: /foo - Not Found"."""
    if route is Route.NOT_FOUND:
        logger.info(f"{request.method}: {request.path_string} - Not Found")
    else:
        logger.info(f"{request.method}: {request.path_string}")


def handle(route: Route, request: HTTPRequest, state: ServerState) -> HTTPResponse:
    """
    Produce the response for an already classified request.

    For callers that already hold `state` exclusively (see
    StateCell.exclusive), e.g. a custom handler that reads other state
    in the same critical section. Everything here runs inside the
    caller's lock; dispatch() is the variant that holds it only for the
    increment.

    Args:
        route: Result of classify(request).
        request: The parsed request.
        state: The server's state, exclusively held by the caller.

    Returns:
        404 for NOT_FOUND, 200 greeting for ROOT. Never raises for a
        parsed request.
    """
    if route is Route.NOT_FOUND:
        response = not_found_response(request)
    else:
        response = greeting_response(request, state.record_visit())

    log_access(route, request)
    return response


def dispatch(
    request: HTTPRequest,
    cell: StateCell,
    lock_timeout: Optional[float] = None,
) -> HTTPResponse:
    """
    Handle one request end to end.

    NOT_FOUND never touches the cell. ROOT holds it for the increment
    only; the greeting is built and logged after the lock is released.

    Raises:
        StateAccessError: Only if `lock_timeout` is set and expires.
    """
    route = classify(request)

    if route is Route.NOT_FOUND:
        response = not_found_response(request)
    else:
        with cell.exclusive(timeout=lock_timeout) as state:
            count = state.record_visit()
        response = greeting_response(request, count)

    log_access(route, request)
    return response
