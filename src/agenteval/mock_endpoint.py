"""In-process stand-in for the users endpoint under test.

``GET /users/<id>`` returns 200 with a generated user for ids 1..100 and
404 ``{"error": "User not found"}`` for anything else. The id segment is
read like a lenient integer parse: the leading signed digits count and the
rest is ignored, so ``/users/5abc`` is user 5 and ``/users/abc`` is a 404.

Wrap it in an httpx transport to run the agent without a server::

    catalog = ToolCatalog(transport=mock_transport())
"""

from __future__ import annotations

import logging
import re
from typing import Any

import httpx

logger = logging.getLogger(__name__)

MIN_USER_ID = 1
MAX_USER_ID = 100

_ROUTE_RE = re.compile(r"^/users/([^/]+)/?$")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def generate_user(user_id: int) -> dict[str, Any]:
    return {
        "id": user_id,
        "name": f"User {user_id}",
        "email": f"user{user_id}@example.com",
    }


def _parse_id(segment: str) -> int | None:
    match = _LEADING_INT_RE.match(segment)
    return int(match.group(1)) if match else None


def _not_found_page(method: str, path: str) -> httpx.Response:
    body = (
        '<!DOCTYPE html>\n<html lang="en">\n<head>\n<meta charset="utf-8">\n'
        "<title>Error</title>\n</head>\n<body>\n"
        f"<pre>Cannot {method} {path}</pre>\n</body>\n</html>\n"
    )
    return httpx.Response(
        404, text=body, headers={"content-type": "text/html; charset=utf-8"}
    )


def handle_request(request: httpx.Request) -> httpx.Response:
    """Serve one request against the users route."""
    path = request.url.path
    match = _ROUTE_RE.match(path)
    if request.method != "GET" or match is None:
        logger.debug("Mock endpoint: no route for %s %s", request.method, path)
        return _not_found_page(request.method, path)

    user_id = _parse_id(match.group(1))
    if user_id is not None and MIN_USER_ID <= user_id <= MAX_USER_ID:
        logger.debug("Mock endpoint: user %d found", user_id)
        return httpx.Response(200, json=generate_user(user_id))

    logger.debug("Mock endpoint: user %r not found", match.group(1))
    return httpx.Response(404, json={"error": "User not found"})


def mock_transport() -> httpx.MockTransport:
    """httpx transport that answers every request with handle_request."""
    return httpx.MockTransport(handle_request)
