"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server can put on the wire, with their reason
phrases.

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  2xx   │ 200 OK            - Greeting response                    │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  4xx   │ 404 Not Found     - Any path other than "/"              │
    │        │ 400/405/408/413   - Request could not be read or parsed  │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  5xx   │ 500/503/505       - Handler failure, overload, version   │
    └────────┴───────────────────────────────────────────────────────────┘

Only 200 and 404 come out of the request handler. The rest are produced
by the server around it when a request never reaches the handler or the
handler raises.

=============================================================================
"""

from enum import IntEnum
from typing import Union


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    # 2xx SUCCESS
    OK = 200

    # 4xx CLIENT ERRORS
    BAD_REQUEST = 400                   # Malformed request syntax
    NOT_FOUND = 404                     # Path is not "/"
    METHOD_NOT_ALLOWED = 405            # Unknown request method
    REQUEST_TIMEOUT = 408               # Client never finished sending
    PAYLOAD_TOO_LARGE = 413             # Request exceeds max_request_size

    # 5xx SERVER ERRORS
    INTERNAL_SERVER_ERROR = 500         # Handler raised
    SERVICE_UNAVAILABLE = 503           # Thread pool queue is full
    HTTP_VERSION_NOT_SUPPORTED = 505    # Not HTTP/1.0 or HTTP/1.1

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line ("HTTP/1.1 404 Not Found")."""
        return _STATUS_PHRASES.get(self, "Unknown")


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.REQUEST_TIMEOUT: "Request Timeout",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
    HTTPStatus.HTTP_VERSION_NOT_SUPPORTED: "HTTP Version Not Supported",
}


def reason_phrase(status: Union[int, HTTPStatus]) -> str:
    """
    Get the reason phrase for any integer status code.

    Codes outside the enum are passed through by the response model
    unchanged, so they get a generic phrase instead of raising.
    """
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Unknown"
