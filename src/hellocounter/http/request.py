"""
=============================================================================
HTTP REQUEST PARSING
=============================================================================

Turns the raw bytes read from a connection into an immutable HTTPRequest.

=============================================================================
HTTP REQUEST STRUCTURE
=============================================================================

    GET /?name=Ada HTTP/1.1\r\n          ← Request line
    Host: localhost:8337\r\n              ← Headers
    User-Agent: curl/8.0\r\n
    \r\n                                  ← Empty line ends headers
    (no body)

The request line carries everything the greeting handler looks at:

    GET /?name=Ada HTTP/1.1
    ─┬─ ─┬─ ───┬──── ───┬────
     │   │     │        │
     │   │     │        └── version (keep-alive default)
     │   │     └── query string → {"name": ["Ada"]}
     │   └── path → () (root, no segments)
     └── method (logged, never routed on)

=============================================================================
PATH SEGMENTS
=============================================================================

The path is stored as a tuple of segments, with empty segments dropped:

    "/"          → ()
    "/foo"       → ("foo",)
    "/foo/bar/"  → ("foo", "bar")
    "//"         → ()
    "/%2F"       → ("/",)
    "/.."        → ("..",)

Splitting happens before percent-decoding, so an encoded slash stays
inside its segment and never turns a path into the root. ".." is just a
segment name: nothing here maps paths onto files.

An empty tuple is the root. path_string rebuilds the slash-joined form
with a leading slash for logs and "Not Found" bodies.

=============================================================================
REPEATED QUERY KEYS
=============================================================================

"?name=Ada&name=Grace" keeps both values in query_params, but
get_param() returns the FIRST one. Blank values are kept ("?name=" gives
"") so callers can tell "present but empty" from "absent".

=============================================================================
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple
from urllib.parse import parse_qs, unquote, urlparse


class HTTPParseError(Exception):
    """
    Raised when HTTP request parsing fails.

    Carries the status code the server should answer with:

        400 Bad Request                - Malformed request syntax
        405 Method Not Allowed         - Unknown method
        413 Payload Too Large          - Request exceeds size limit
        505 HTTP Version Not Supported - Unknown HTTP version
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class HTTPMethod(str, Enum):
    """Request methods the parser accepts."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"
    CONNECT = "CONNECT"

    def __str__(self) -> str:
        return self.value


def split_path(path: str) -> Tuple[str, ...]:
    """Split a raw URL path on "/", then percent-decode each non-empty segment."""
    return tuple(unquote(segment) for segment in path.split("/") if segment)


@dataclass(frozen=True)
class HTTPRequest:
    """
    One parsed inbound HTTP request.

    Frozen: the parser builds it once, the handler only reads it, and it
    is dropped after the response is written.

    Attributes:
        method:         HTTPMethod. Informational only, used in logs.
        path:           Tuple of path segments, () for "/".
        query_params:   Query string as {key: [values...]}, blanks kept.
        version:        "HTTP/1.0" or "HTTP/1.1".
        headers:        Header names lowercased, repeated headers joined
                        with ", ".
        client_address: (ip, port) of the peer.
    """

    method: HTTPMethod
    path: Tuple[str, ...] = ()
    query_params: Dict[str, List[str]] = field(default_factory=dict)
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    client_address: Tuple[str, int] = ("", 0)

    @property
    def path_string(self) -> str:
        """
        Slash-joined path with a leading slash: ("foo", "bar") → "/foo/bar".

        A "/" decoded inside a segment is written back as %2F, so
        "/foo%2Fbar" renders as itself and not as "/foo/bar".
        """
        return "/" + "/".join(segment.replace("/", "%2F") for segment in self.path)

    @property
    def is_keep_alive(self) -> bool:
        """
        Whether the client expects the connection to stay open.

            HTTP/1.1: keep-alive unless "Connection: close"
            HTTP/1.0: close unless "Connection: keep-alive"
        """
        connection = self.headers.get("connection", "").lower()

        if self.version == "HTTP/1.1":
            return connection != "close"
        return connection == "keep-alive"

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)

    def get_param(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get a query parameter, first occurrence wins.

        Example:
            # GET /?name=Ada&name=Grace
            request.get_param("name")            # "Ada"
            request.get_param("missing", "x")    # "x"
        """
        values = self.query_params.get(name)
        return values[0] if values else default

    def get_param_list(self, name: str) -> List[str]:
        """All values of a query parameter, in request order."""
        return list(self.query_params.get(name, []))


class RequestParser:
    """
    Parses raw HTTP request bytes into HTTPRequest objects.

        Raw Request Bytes
              │
              ▼
        ┌───────────────────────────────────────────────────────────────┐
        │  1. Size check             too large? → 413                   │
        │  2. Find \\r\\n\\r\\n          missing?   → 400                   │
        │  3. Request line           METHOD SP URI SP VERSION           │
        │                            bad syntax → 400, method → 405,    │
        │                            version → 505                      │
        │  4. Headers                "Name: Value", lowercased names    │
        │  5. Split path + query     segments, parse_qs                 │
        └───────────────────────────────────────────────────────────────┘
              │
              ▼
        HTTPRequest

    Request bodies are never interpreted; the connection layer already
    consumed Content-Length bytes so the next pipelined request lines up.
    """

    REQUEST_LINE_PATTERN = re.compile(r"^([A-Z]+) ([^ ]+) (HTTP/\d\.\d)$")
    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")
    SUPPORTED_VERSIONS = ("HTTP/1.0", "HTTP/1.1")

    def __init__(self, max_request_size: int = 1024 * 1024):
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: Tuple[str, int] = ("", 0),
    ) -> HTTPRequest:
        """
        Parse raw HTTP request data into an HTTPRequest.

        Args:
            data: Raw request bytes from the socket.
            client_address: Peer (ip, port), kept for logging.

        Raises:
            HTTPParseError: If the request is malformed.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(
                f"Request too large: {len(data)} bytes",
                status_code=413,
            )

        header_end = data.find(b"\r\n\r\n")
        if header_end == -1:
            raise HTTPParseError("Incomplete request: no header terminator")

        header_section = data[:header_end].decode("utf-8", errors="replace")
        lines = header_section.split("\r\n")

        method, path, query_params, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        return HTTPRequest(
            method=method,
            path=path,
            query_params=query_params,
            version=version,
            headers=headers,
            client_address=client_address,
        )

    def _parse_request_line(
        self,
        line: str,
    ) -> Tuple[HTTPMethod, Tuple[str, ...], Dict[str, List[str]], str]:
        """
        Parse "METHOD SP REQUEST-URI SP HTTP-VERSION".

        Returns:
            (method, path segments, query params, version)
        """
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line}")

        raw_method, uri, version = match.groups()

        try:
            method = HTTPMethod(raw_method)
        except ValueError:
            raise HTTPParseError(
                f"Invalid method: {raw_method}",
                status_code=405,
            ) from None

        if version not in self.SUPPORTED_VERSIONS:
            raise HTTPParseError(
                f"Unsupported HTTP version: {version}",
                status_code=505,
            )

        # Origin-form "//x" is a path, not a netloc; only absolute-form goes through urlparse.
        raw_path, _, query = uri.partition("?")
        if "://" in raw_path:
            raw_path = urlparse(raw_path).path
        path = split_path(raw_path)
        query_params = parse_qs(query, keep_blank_values=True)

        return method, path, query_params, version

    def _parse_headers(self, lines: List[str]) -> Dict[str, str]:
        """
        Parse header lines into a dict with lowercase names.

        Continuation lines (leading whitespace) extend the previous
        header; repeated headers are joined with ", "; malformed lines
        are skipped.
        """
        headers: Dict[str, str] = {}
        current_name = None

        for line in lines:
            if not line:
                continue

            if line[0] in (" ", "\t"):
                if current_name is not None:
                    headers[current_name] += " " + line.strip()
                continue

            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue

            name, value = match.groups()
            name = name.strip().lower()
            value = value.strip()
            current_name = name

            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value

        return headers


def parse_request(
    data: bytes,
    client_address: Tuple[str, int] = ("", 0),
    max_size: int = 1024 * 1024,
) -> HTTPRequest:
    """One-shot helper around RequestParser."""
    return RequestParser(max_request_size=max_size).parse(data, client_address)
