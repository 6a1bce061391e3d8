"""
Proxy blueprint and route registration.
"""

from flask import Blueprint

bp = Blueprint("proxy", __name__)

# Paths owned by the admin feature - never proxied, whatever the method
RESERVED_PATHS = ("/admin", "/api/config")

PROXY_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS", "HEAD"]

# Import routes for side effects (decorators attach to bp)
from . import routes  # noqa: E402,F401
