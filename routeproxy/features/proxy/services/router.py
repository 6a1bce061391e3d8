"""
Longest-prefix route selection.
"""

from __future__ import annotations

from typing import Iterable, Optional, Union

from routeproxy.models.route_config import Config, Route


def resolve(routes: Union[Config, Iterable[Route]], request_path: str) -> Optional[Route]:
    """
    Return the route whose ``path`` is the longest prefix of ``request_path``.

    Matching is a plain, case-sensitive ``startswith``. Among routes of equal
    length the one configured first wins. Returns None when nothing matches.
    """
    if isinstance(routes, Config):
        candidates = routes.ordered_routes
    else:
        candidates = sorted(routes, key=lambda r: len(r.path), reverse=True)

    for route in candidates:
        if request_path.startswith(route.path):
            return route
    return None
