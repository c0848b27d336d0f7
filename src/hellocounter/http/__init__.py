"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

    request.py       Raw bytes → HTTPRequest (method, path segments, query)
    response.py      HTTPResponse value and its wire serialization
    router.py        HTTPRequest → Route (ROOT or NOT_FOUND)
    status_codes.py  HTTPStatus enum with reason phrases

=============================================================================
"""

from .request import HTTPRequest, HTTPMethod, RequestParser, HTTPParseError, parse_request
from .response import HTTPResponse, error_response, TEXT_PLAIN
from .router import Route, classify
from .status_codes import HTTPStatus

__all__ = [
    # Request parsing
    "HTTPRequest",
    "HTTPMethod",
    "RequestParser",
    "HTTPParseError",
    "parse_request",
    # Responses
    "HTTPResponse",
    "error_response",
    "TEXT_PLAIN",
    # Routing
    "Route",
    "classify",
    # Status codes
    "HTTPStatus",
]
