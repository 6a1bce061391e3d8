"""
Routing configuration API.

GET returns the cached config; POST replaces it wholesale after checking the
shared admin password.
"""

import hmac
import logging

from flask import current_app, jsonify, request

from routeproxy.models.config_cache import get_config_cache
from routeproxy.models.config_store import ConfigStoreError
from routeproxy.models.route_config import Config, routes_from_list

from ..blueprint import bp

logger = logging.getLogger(__name__)

_POST_FIELDS = {"routes", "password"}


def _password_matches(password) -> bool:
    if not isinstance(password, str):
        return False
    expected = current_app.config["ADMIN_PASSWORD"]
    return hmac.compare_digest(password.encode("utf-8"), expected.encode("utf-8"))


@bp.route("/api/config", methods=["GET"])
def get_config():
    """Current routing config as {"routes": [{"path", "target"}, ...]}."""
    try:
        config = get_config_cache().read(strict=True)
    except ConfigStoreError as e:
        # Never answer an outage with an empty table the admin page could save back
        return jsonify({"success": False, "error": str(e)}), 500
    return jsonify(config.to_dict())


@bp.route("/api/config", methods=["POST"])
def save_config():
    """Replace the routing config. Body: {"routes": [...], "password": "..."}."""
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        return jsonify({"success": False, "error": "Request body must be a JSON object"}), 400

    if not _password_matches(data.get("password")):
        logger.warning(f"Rejected config update from {request.remote_addr}: invalid password")
        return jsonify({"success": False, "error": "Invalid Password"}), 401

    unknown = sorted(set(data) - _POST_FIELDS)
    if unknown:
        return jsonify({"success": False, "error": f"Unknown field(s): {', '.join(unknown)}"}), 400

    try:
        config = Config(routes=routes_from_list(data.get("routes")))
    except ValueError as e:
        return jsonify({"success": False, "error": str(e)}), 400

    try:
        get_config_cache().write(config)
    except ConfigStoreError as e:
        logger.error(f"Error saving routing config: {e}")
        return jsonify({"success": False, "error": str(e)}), 500
    except Exception as e:
        logger.error(f"Unexpected error saving routing config: {e}", exc_info=True)
        return jsonify({"success": False, "error": str(e)}), 500

    logger.info(f"Routing config saved ({len(config.routes)} route(s))")
    return jsonify({"success": True})
