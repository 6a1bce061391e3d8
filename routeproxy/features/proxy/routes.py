"""
Catch-all proxy route: resolve the request path against the configured
routes and forward it to the matching target.
"""

from __future__ import annotations

import logging

from flask import Response, abort, request

from routeproxy.models.config_cache import get_config_cache

from .blueprint import PROXY_METHODS, RESERVED_PATHS, bp
from .services.forwarder import forward
from .services.router import resolve
from .services.urls import get_raw_path

logger = logging.getLogger(__name__)

NO_ROUTE_MESSAGE = 'Route not configured. Go to <a href="/admin">/admin</a>'


@bp.route("/", defaults={"path": ""}, methods=PROXY_METHODS)
@bp.route("/<path:path>", methods=PROXY_METHODS)
def proxy_path(path: str):
    """Forward any request outside the admin surface to its upstream target."""
    if request.path in RESERVED_PATHS:
        # Known admin path, unsupported method
        abort(405)

    request_path = get_raw_path()
    config = get_config_cache().read()

    route = resolve(config, request_path)
    if route is None:
        logger.info(f"No route for {request.method} {request_path}")
        return Response(NO_ROUTE_MESSAGE, status=404, mimetype="text/html")

    return forward(route, request_path)
