"""
=============================================================================
REQUEST ROUTER
=============================================================================

Classifies a request into exactly one route by its path.

    ┌──────────────────────────┬──────────────┐
    │ request.path (segments)  │ Route        │
    ├──────────────────────────┼──────────────┤
    │ ()            "/"        │ ROOT         │
    │ ("foo",)      "/foo"     │ NOT_FOUND    │
    │ ("a", "b")    "/a/b/"    │ NOT_FOUND    │
    └──────────────────────────┴──────────────┘

There is no pattern table, prefix match or parameter routing: the root is
the only page this server has. The method is not looked at; GET / and
POST / both land on ROOT.

=============================================================================
"""

from enum import Enum

from .request import HTTPRequest


class Route(Enum):
    """Outcome of classifying a request path."""

    ROOT = "root"
    NOT_FOUND = "not_found"


def classify(request: HTTPRequest) -> Route:
    """ROOT iff the request has no path segments, NOT_FOUND otherwise."""
    if request.path:
        return Route.NOT_FOUND
    return Route.ROOT
