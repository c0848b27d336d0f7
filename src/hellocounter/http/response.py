"""
=============================================================================
HTTP RESPONSE MODEL AND SERIALIZATION
=============================================================================

The handler returns an immutable HTTPResponse; the server turns it into
bytes for the socket.

=============================================================================
RESPONSE LIFECYCLE
=============================================================================

    Handler returns          to_bytes()              Socket sends
    HTTPResponse    ─────►   serializes    ─────►    raw bytes
        │                       │                        │
    HTTPResponse(            b"HTTP/1.1 200 OK\\r\\n    conn.send_response(
      status=200,              Content-Type: ...\\r\\n     response_bytes
      body=b"hello...",        Content-Length: 97\\r\\n  )
      content_type=            ...
        "text/plain",          \\r\\n
    )                          hello ...

=============================================================================
TWO CONSTRUCTORS
=============================================================================

    HTTPResponse.ok(body, content_type)                  → 200
    HTTPResponse.with_status(status, body, content_type) → any status

Serialization passes status, content type and body through unchanged.
Content-Length, Date and Server are added on the way out; connection
headers come from the server, which knows whether to keep the socket.

=============================================================================
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional, Union

from .status_codes import HTTPStatus, reason_phrase


TEXT_PLAIN = "text/plain"


def _to_bytes(body: Union[str, bytes]) -> bytes:
    if isinstance(body, str):
        return body.encode("utf-8")
    return body


@dataclass(frozen=True)
class HTTPResponse:
    """
    An HTTP response ready to be sent.

    Attributes:
        status:       Numeric status code (HTTPStatus or plain int).
        body:         Payload bytes. Strings passed to the constructors
                      are UTF-8 encoded.
        content_type: Sent verbatim as the Content-Type header.
        version:      HTTP version on the status line.
    """

    status: int = HTTPStatus.OK
    body: bytes = b""
    content_type: str = TEXT_PLAIN
    version: str = "HTTP/1.1"

    def __post_init__(self):
        # Accept str bodies while keeping the stored value bytes.
        object.__setattr__(self, "body", _to_bytes(self.body))

    @classmethod
    def ok(cls, body: Union[str, bytes], content_type: str = TEXT_PLAIN) -> "HTTPResponse":
        """Success form: status 200 with the given body and content type."""
        return cls(status=HTTPStatus.OK, body=body, content_type=content_type)

    @classmethod
    def with_status(
        cls,
        status: Union[int, HTTPStatus],
        body: Union[str, bytes],
        content_type: str = TEXT_PLAIN,
    ) -> "HTTPResponse":
        """Status form: explicit status, body and content type."""
        return cls(status=status, body=body, content_type=content_type)

    @property
    def status_line(self) -> str:
        """
        HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE

        Example: "HTTP/1.1 404 Not Found"
        """
        return f"{self.version} {int(self.status)} {reason_phrase(self.status)}"

    @property
    def text(self) -> str:
        """Body decoded as UTF-8, for logs and tests."""
        return self.body.decode("utf-8", errors="replace")

    def to_bytes(
        self,
        server_name: str = "hello-counter/1.0",
        headers: Optional[Dict[str, str]] = None,
        include_body: bool = True,
    ) -> bytes:
        """
        Serialize the response for socket.sendall().

            HTTP/1.1 200 OK\\r\\n             ← Status line
            Content-Type: text/plain\\r\\n    ← As constructed
            Content-Length: 97\\r\\n          ← len(body)
            Date: Sun, 18 Oct 2026 ...\\r\\n
            Server: hello-counter/1.0\\r\\n
            Connection: keep-alive\\r\\n      ← From `headers`
            \\r\\n
            <body bytes>

        Args:
            server_name: Value of the Server header.
            headers: Extra headers (connection management). They cannot
                     override Content-Type or Content-Length.
            include_body: False for a HEAD reply: headers describe the
                          body (Content-Length stays len(body)) but
                          the body itself is left off.
        """
        response_headers = {
            "Content-Type": self.content_type,
            "Content-Length": str(len(self.body)),
            "Date": format_http_date(datetime.now(timezone.utc)),
            "Server": server_name,
        }
        for name, value in (headers or {}).items():
            if name.lower() in ("content-type", "content-length"):
                continue
            response_headers[name] = value

        lines = [self.status_line]
        lines.extend(f"{name}: {value}" for name, value in response_headers.items())
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        if not include_body:
            return header_bytes
        return header_bytes + self.body


def format_http_date(dt: datetime) -> str:
    """
    Format a UTC datetime as an HTTP-date (RFC 7231).

    Example: "Sun, 18 Oct 2026 12:00:00 GMT"
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )


def error_response(status: Union[int, HTTPStatus], message: str) -> HTTPResponse:
    """
    Plain-text error for failures that never reach the handler
    (parse errors, timeouts, overload) or where the handler raised.
    """
    return HTTPResponse.with_status(status, message, TEXT_PLAIN)
