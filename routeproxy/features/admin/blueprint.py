"""
Admin blueprint and route registration.
"""

from flask import Blueprint

bp = Blueprint("admin", __name__)

# Import route modules for side-effects (decorators attach to bp).
from .routes import (  # noqa: E402,F401
    config_api,
    pages,
)
