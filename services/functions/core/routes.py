"""
Route matching.

Resolves a request path/method against the routes a function declares.
Matching is stateless; routes are passed in on every call.
"""

import functools
import logging
import re
from typing import Optional, Pattern, Sequence, TypeVar

from ..models.route import RouteSpec

logger = logging.getLogger("functions.routes")

R = TypeVar("R", bound=RouteSpec)

# Route expressions use JavaScript named groups: (?<name>...)
_JS_NAMED_GROUP = re.compile(r"\(\?<([A-Za-z_][A-Za-z0-9_]*)>")


def normalize_path(raw_path: str) -> str:
    """Strip one trailing slash (except for the root) and lowercase."""
    path = raw_path[:-1] if raw_path != "/" and raw_path.endswith("/") else raw_path
    return path.lower()


@functools.lru_cache(maxsize=512)
def compile_expression(expression: str) -> Pattern[str]:
    return re.compile(_JS_NAMED_GROUP.sub(r"(?P<\1>", expression))


def _path_matches(route: RouteSpec, path: str) -> bool:
    if route.literal is not None:
        return path == route.literal

    if route.expression is not None:
        try:
            regex = compile_expression(route.expression)
        except re.error as e:
            logger.warning(
                f"Ignoring route with invalid expression: {route.expression}",
                extra={"expression": route.expression, "error_detail": str(e)},
            )
            return False
        return regex.search(path) is not None

    return False


def match_url_path(
    raw_path: str,
    method: str,
    routes: Optional[Sequence[R]],
    excluded_routes: Optional[Sequence[RouteSpec]] = None,
) -> Optional[R]:
    """
    Return the first route matching the request, unless the path is excluded.

    Args:
        raw_path: request path (e.g., "/api/users/")
        method: HTTP method (e.g., "GET")
        routes: declared routes, scanned in order
        excluded_routes: routes that suppress a match; methods are ignored

    Returns:
        The matching route, or None
    """
    path = normalize_path(raw_path)

    matching_route = next(
        (
            route
            for route in routes or ()
            if route.accepts_method(method) and _path_matches(route, path)
        ),
        None,
    )
    if matching_route is None:
        return None

    if any(_path_matches(excluded, path) for excluded in excluded_routes or ()):
        return None

    return matching_route
